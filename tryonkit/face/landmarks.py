from __future__ import annotations
import mediapipe as mp
import numpy as np
import cv2

class FaceLandmarks:
    def __init__(self, static_image_mode=False, max_num_faces=1, refine_landmarks=True,
                 min_detection_confidence=0.5, min_tracking_confidence=0.5):
        self.mesh = mp.solutions.face_mesh.FaceMesh(static_image_mode=static_image_mode,
                                                    refine_landmarks=refine_landmarks,
                                                    max_num_faces=max_num_faces,
                                                    min_detection_confidence=min_detection_confidence,
                                                    min_tracking_confidence=min_tracking_confidence)

    def __call__(self, frame_bgr):
        rgb = cv2.cvtColor(frame_bgr, cv2.COLOR_BGR2RGB)
        res = self.mesh.process(rgb)
        if not res.multi_face_landmarks: return []
        faces=[]
        h,w = frame_bgr.shape[:2]
        for lms in res.multi_face_landmarks:
            pts = np.array([(lm.x, lm.y) for lm in lms.landmark], dtype=np.float32)
            # pseudo-conf: bbox area, closest face first
            xs = pts[:,0]*w; ys = pts[:,1]*h
            area = (xs.max()-xs.min()) * (ys.max()-ys.min())
            faces.append({"pts": pts, "handedness": None, "score": float(area)})
        faces.sort(key=lambda f: f["score"], reverse=True)
        return faces

    def close(self):
        self.mesh.close()
