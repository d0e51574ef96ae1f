import json
import logging

import zmq

logger = logging.getLogger(__name__)


class StatusPublisher:
    """
    Publishes one newline-free JSON document per processed frame on a
    ZeroMQ PUB socket. Disabled unless publisher.enabled is set.
    """

    def __init__(self, cfg=None, context=None):
        pcfg = (cfg or {}).get("publisher", {})
        self.enabled = bool(pcfg.get("enabled", False))
        self.endpoint = pcfg.get("endpoint", "tcp://*:5555")
        self.topic = pcfg.get("topic", "helping_hand")
        self.context = None
        self.socket = None
        if self.enabled:
            self._own_context = context is None
            self.context = context or zmq.Context()
            self.socket = self.context.socket(zmq.PUB)
            self.socket.bind(self.endpoint)
            logger.info("Publishing status on %s", self.endpoint)

    def publish(self, hand, workflow=None, actuator=None, fps=None):
        if not self.enabled or self.socket is None:
            return False
        payload = {"hand": hand.to_dict(), "fps": fps}
        if workflow is not None:
            payload["workflow"] = {
                "state": workflow.state.value,
                "selected_letter": (
                    workflow.selected_letter.value if workflow.selected_letter else None
                ),
                "success_progress": workflow.success_progress,
            }
        if actuator is not None:
            payload["serial"] = {
                "connected": actuator.is_connected,
                "supported": actuator.is_supported,
                "last_sent": actuator.last_sent,
                "error": actuator.error,
            }
        try:
            self.socket.send_string(f"{self.topic} {json.dumps(payload)}", flags=zmq.NOBLOCK)
            return True
        except zmq.ZMQError as e:
            logger.warning("Publish failed: %s", e)
            return False

    def close(self):
        if self.socket is not None:
            self.socket.close()
            self.socket = None
        if self.context is not None and self._own_context:
            self.context.term()
        self.context = None
