"""Chime protocol and implementations for the expiry sound."""
from __future__ import annotations

import math
import os
from array import array
from typing import Protocol, runtime_checkable

os.environ.setdefault("PYGAME_HIDE_SUPPORT_PROMPT", "1")

import pygame  # noqa: E402

BEEP_FREQUENCY = 880.0  # A5
BEEP_SECONDS = 0.18
BEEP_GAIN = 0.05


@runtime_checkable
class Chime(Protocol):
    """Fire-and-forget sound. Exceptions from ``play`` are dropped by callers."""

    def play(self) -> None:
        ...

    def close(self) -> None:
        ...


class NullChime:
    def play(self) -> None:
        pass

    def close(self) -> None:
        pass


def sine_samples(
    rate: int,
    channels: int = 1,
    frequency: float = BEEP_FREQUENCY,
    seconds: float = BEEP_SECONDS,
    gain: float = BEEP_GAIN,
) -> array:
    """Signed 16-bit interleaved samples of a sine tone."""
    amplitude = int(32767 * gain)
    samples = array("h")
    for n in range(int(rate * seconds)):
        value = int(amplitude * math.sin(2 * math.pi * frequency * n / rate))
        samples.extend([value] * channels)
    return samples


class PygameChime:
    """Short sine beep through pygame.mixer.

    The mixer is opened lazily on the first ``play`` so constructing the
    chime never touches the audio device.
    """

    def __init__(self) -> None:
        self._sound: pygame.mixer.Sound | None = None

    def _load(self) -> pygame.mixer.Sound:
        if pygame.mixer.get_init() is None:
            pygame.mixer.init(frequency=44100, size=-16, channels=1)
        rate, size, channels = pygame.mixer.get_init()
        if size != -16:
            raise pygame.error(f"unsupported mixer sample size {size}")
        return pygame.mixer.Sound(buffer=sine_samples(rate, channels).tobytes())

    def play(self) -> None:
        if self._sound is None:
            self._sound = self._load()
        self._sound.play()

    def close(self) -> None:
        self._sound = None
        if pygame.mixer.get_init() is not None:
            pygame.mixer.quit()
