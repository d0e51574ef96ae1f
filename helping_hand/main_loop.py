import logging
import threading
import time
from collections import deque
from queue import Empty, Queue

import cv2
import numpy as np

from helping_hand.HandTracker import HandTracker
from helping_hand.SerialActuator import SerialActuator
from helping_hand.Session import TrainerSession
from helping_hand.StatusPublisher import StatusPublisher
from helping_hand.helpers import ConfigWatcher, draw_error, draw_hand, draw_metrics, draw_status

logger = logging.getLogger(__name__)

# --------------------------------------------------------
# Queue for latest frame only (overwrite when full)
# --------------------------------------------------------
FRAME_QUEUE_MAX = 1
POLL_INTERVAL = 0.05  # seconds; keeps workflow timers ticking at >= 10 Hz
CAMERA_ERROR = "Camera access denied or not available."
TRACKER_ERROR = "Hand tracking could not be started."


# --------------------------------------------------------
# CAPTURE THREAD
# --------------------------------------------------------
def capture_thread(frame_queue, stop_event, cfg, errors):
    camera_cfg = cfg.get("camera", {})
    cap = cv2.VideoCapture(camera_cfg.get("index", 0))
    tracker = None
    try:
        if not cap.isOpened():
            logger.error("Cannot open camera")
            errors.append(CAMERA_ERROR)
            return

        cap.set(cv2.CAP_PROP_FRAME_WIDTH, camera_cfg.get("frame_width", 960))
        cap.set(cv2.CAP_PROP_FRAME_HEIGHT, camera_cfg.get("frame_height", 540))
        try:
            tracker = HandTracker(cfg)
        except (RuntimeError, OSError, ValueError) as e:
            logger.error("Hand tracker failed to start: %s", e)
            errors.append(TRACKER_ERROR)
            return
        mirror = camera_cfg.get("mirror", True)

        fps_times = deque(maxlen=cfg.get("debug", {}).get("fps_window", 20))
        current_fps = 0.0

        logger.info("Capture thread started.")

        while not stop_event.is_set():
            ok, frame = cap.read()
            if not ok:
                time.sleep(0.01)
                continue

            now = time.time()
            fps_times.append(now)
            if len(fps_times) > 1:
                current_fps = (len(fps_times) - 1) / (fps_times[-1] - fps_times[0])

            if mirror:
                frame = cv2.flip(frame, 1)
            rgb = cv2.cvtColor(frame, cv2.COLOR_BGR2RGB)
            landmarks = tracker.process_frame(rgb)

            if frame_queue.full():
                try:
                    frame_queue.get_nowait()  # remove older frame
                except Empty:
                    pass
            frame_queue.put_nowait((frame, landmarks, now, current_fps))
    finally:
        cap.release()
        if tracker is not None:
            tracker.close()
        logger.info("Capture thread exiting.")


# --------------------------------------------------------
# EVENT THREAD (sole owner of recognizer/workflow/actuator)
# --------------------------------------------------------
def event_thread(frame_queue, stop_event, cfg, errors, mode, config_path):
    cfg_watcher = ConfigWatcher(config_path)
    file_cfg = cfg_watcher.get_config()
    # cfg already carries command-line overrides on top of the file
    current_cfg = cfg

    session = TrainerSession(
        current_cfg,
        SerialActuator(current_cfg),
        publisher=StatusPublisher(current_cfg),
        mode=mode,
    )
    if current_cfg.get("serial", {}).get("auto_connect", False):
        session.actuator.connect()

    camera_cfg = current_cfg.get("camera", {})
    debug_cfg = current_cfg.get("debug", {})
    window = "Helping Hand"
    cv2.namedWindow(window, cv2.WINDOW_NORMAL)
    blank = np.zeros(
        (camera_cfg.get("frame_height", 540), camera_cfg.get("frame_width", 960), 3),
        dtype=np.uint8,
    )

    logger.info("Event thread started (%s mode).", mode)

    frame = blank
    try:
        while not stop_event.is_set():
            new_cfg = cfg_watcher.check_reload()
            if new_cfg is not file_cfg:
                file_cfg = new_cfg
                session.update_config(new_cfg)

            if errors and session.tracking_error is None:
                session.tracking_error = errors.pop()

            try:
                frame, landmarks, timestamp, fps = frame_queue.get(timeout=POLL_INTERVAL)
                session.handle_frame(landmarks, timestamp, fps)
            except Empty:
                fps = None
                session.tick()

            hand = session.last_hand
            canvas = frame.copy()
            if hand is not None:
                if debug_cfg.get("draw_landmarks", True):
                    draw_hand(canvas, hand.landmarks)
                draw_status(
                    canvas,
                    hand,
                    workflow=session.workflow if mode == "practice" else None,
                    actuator=session.actuator,
                    fps=fps if debug_cfg.get("show_fps", True) else None,
                )
                if debug_cfg.get("draw_metrics", True):
                    draw_metrics(canvas, hand.metrics)
            draw_error(canvas, session.error)

            cv2.imshow(window, canvas)
            if not session.handle_key(cv2.waitKey(1) & 0xFF):
                stop_event.set()
                break
    finally:
        session.shutdown()
        cv2.destroyAllWindows()
        logger.info("Event thread exiting.")


# --------------------------------------------------------
# MAIN ENTRY
# --------------------------------------------------------
def main(cfg, mode="practice", config_path="config.json"):
    frame_queue = Queue(maxsize=FRAME_QUEUE_MAX)
    stop_event = threading.Event()
    errors = []

    cap_thread = threading.Thread(
        target=capture_thread, args=(frame_queue, stop_event, cfg, errors), daemon=True
    )
    evt_thread = threading.Thread(
        target=event_thread,
        args=(frame_queue, stop_event, cfg, errors, mode, config_path),
        daemon=True,
    )

    cap_thread.start()
    evt_thread.start()

    try:
        while not stop_event.is_set() and evt_thread.is_alive():
            time.sleep(0.1)
    except KeyboardInterrupt:
        pass
    stop_event.set()

    cap_thread.join(timeout=1.0)
    evt_thread.join(timeout=1.0)

    logger.info("Shutdown complete.")
