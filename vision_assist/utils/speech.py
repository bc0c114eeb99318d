"""
Speech management utilities for Vision Assist
"""
import pyttsx3
import queue
import threading
import time
import logging

from .. import config


class SpeechManager:
    def __init__(self, rate=None, pitch=None, cooldown=None, enabled=True, clock=time.time):
        self.logger = logging.getLogger("SpeechManager")

        self.rate = config.SPEECH_RATE if rate is None else rate
        self.pitch = config.SPEECH_PITCH if pitch is None else pitch
        self.cooldown = config.WARNING_COOLDOWN if cooldown is None else cooldown
        self.clock = clock

        # Initialize the text-to-speech engine with proper error handling
        self.engine = None
        self.tts_working = False
        if enabled:
            try:
                self.engine = pyttsx3.init()
                # pyttsx3 works in words per minute, scale its default like a browser utterance rate
                base_rate = self.engine.getProperty('rate') or 200
                self.engine.setProperty('rate', int(base_rate * self.rate))
                self.tts_working = True
                self.logger.info(f"TTS initialized at rate {self.engine.getProperty('rate')}")
            except Exception as e:
                self.logger.error(f"Failed to initialize TTS engine: {e}")
                self.engine = None

        # Speech queue and status
        self.speech_queue = queue.Queue()
        self.speaking = False
        self.muted = False
        self.last_spoken = ""
        self.last_spoken_time = 0.0
        self._lock = threading.Lock()
        self._stop_event = threading.Event()

        # Start the speech thread
        self.speech_thread = threading.Thread(target=self.speech_worker, name="speech-worker")
        self.speech_thread.daemon = True
        self.speech_thread.start()

    def speech_worker(self):
        """Background thread to handle speech without blocking the frame loop"""
        while not self._stop_event.is_set():
            try:
                text = self.speech_queue.get(timeout=0.1)
            except queue.Empty:
                continue

            try:
                if self.tts_working:
                    self.speaking = True
                    self.logger.info(f"Speaking: {text}")
                    self.engine.say(text)
                    self.engine.runAndWait()
                else:
                    self.logger.info(f"TTS disabled, would have said: {text}")
            except Exception as e:
                self.logger.error(f"Error in speech worker: {e}")
            finally:
                self.speaking = False

    def speak(self, text):
        """Speak a warning unless muted or it repeats the last one within the cooldown"""
        if not text or self.muted:
            return None

        with self._lock:
            now = self.clock()
            if text == self.last_spoken and now - self.last_spoken_time <= self.cooldown:
                return None
            self.last_spoken = text
            self.last_spoken_time = now

        self.cancel()
        self.speech_queue.put(text)
        return text

    def announce(self, text):
        """Speak a system message regardless of mute state"""
        if not text:
            return None
        self.cancel()
        self.speech_queue.put(text)
        return text

    def toggle_mute(self):
        """Flip voice warnings on or off and say which"""
        self.muted = not self.muted
        message = "Voice warnings disabled" if self.muted else "Voice warnings enabled"
        self.announce(message)
        return self.muted

    def cancel(self):
        """Drop queued speech and stop the current utterance"""
        while True:
            try:
                self.speech_queue.get_nowait()
            except queue.Empty:
                break

        if self.engine is not None and self.speaking:
            try:
                self.engine.stop()
            except Exception as e:
                self.logger.warning(f"Could not stop current utterance: {e}")

    def stop(self):
        """Cancel speech and end the worker thread"""
        self.cancel()
        self._stop_event.set()
        self.speech_thread.join(timeout=1.0)

    def get_last_spoken(self):
        return self.last_spoken
