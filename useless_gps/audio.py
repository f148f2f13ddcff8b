"""Commentary output: text-to-speech with a printed fallback."""

import subprocess
from typing import Optional, Callable


class Audio:
    """Speaks commentary lines"""

    callback: Optional[Callable[[str], None]] = None  # Class-level callback for viewers/tests

    def __init__(self, speech: bool = False):
        self.speech = speech

    @classmethod
    def set_callback(cls, callback: Optional[Callable[[str], None]]):
        """Set callback function for commentary events"""
        cls.callback = callback

    def speak(self, text: str):
        """Speak text using espeak, or print it"""
        if Audio.callback:
            Audio.callback(text)

        if not self.speech:
            print(f"[ANIME] {text}")
            return

        try:
            subprocess.run(
                ["espeak", "-s", "150", text],
                capture_output=True,
                timeout=10
            )
        except FileNotFoundError:
            print(f"[ANIME] {text}")
        except subprocess.TimeoutExpired as e:
            print(f"Audio error: {e}")
            print(f"[ANIME] {text}")
