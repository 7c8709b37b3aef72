import json
import logging
import time

import zmq

log = logging.getLogger(__name__)


class UtterancePublisher:
    """
    Downstream consumer for finalized utterances: publishes
    ``{"text", "emotion", "timestamp"}`` as JSON on a ZeroMQ PUB socket.
    Pass the instance itself as the engine's ``on_utterance`` callback.
    """

    def __init__(self, endpoint="tcp://*:5556", context=None):
        self.endpoint = endpoint
        self._own_context = context is None
        self.context = context or zmq.Context()
        self.socket = self.context.socket(zmq.PUB)
        self.socket.bind(endpoint)
        log.info("Publishing utterances on %s", endpoint)

    def __call__(self, text, emotion):
        self.publish(text, emotion)

    def publish(self, text, emotion):
        msg = json.dumps({"text": text, "emotion": emotion, "timestamp": time.time()})
        self.socket.send_string(msg)

    def close(self):
        self.socket.close()
        if self._own_context:
            self.context.term()
