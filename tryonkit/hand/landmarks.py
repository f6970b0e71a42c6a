from __future__ import annotations
import mediapipe as mp
import numpy as np
import cv2

class HandLandmarks:
    def __init__(self, max_hands=2, model_complexity=0, min_detection_confidence=0.5, min_tracking_confidence=0.5):
        self.hands = mp.solutions.hands.Hands(max_num_hands=max_hands, model_complexity=model_complexity,
                                              min_detection_confidence=min_detection_confidence,
                                              min_tracking_confidence=min_tracking_confidence)
    def __call__(self, frame_bgr):
        rgb = cv2.cvtColor(frame_bgr, cv2.COLOR_BGR2RGB)
        res = self.hands.process(rgb)
        if not res.multi_hand_landmarks: return []
        out=[]
        handedness = res.multi_handedness or []
        for i, lm in enumerate(res.multi_hand_landmarks):
            pts = np.array([(p.x,p.y,p.z) for p in lm.landmark], dtype=float)
            if i < len(handedness):
                cls = handedness[i].classification[0]
                out.append({"pts":pts, "handedness": cls.label.lower(), "score": float(cls.score)})
            else:
                out.append({"pts":pts, "handedness": "right", "score": 0.0})
        return out
    def close(self):
        self.hands.close()
