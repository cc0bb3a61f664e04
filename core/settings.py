from __future__ import annotations

from dataclasses import dataclass

from PySide6.QtCore import QSettings

from core.overlay import DEFAULT_BORDER_RATIO

ORGANIZATION = "ImageTrimmer"
APPLICATION = "ImageTrimmer"


def open_settings() -> QSettings:
    return QSettings(ORGANIZATION, APPLICATION)


@dataclass
class CanvasSettings:
    border_ratio: float = DEFAULT_BORDER_RATIO
    wheel_pan_step: float = 20.0   # pixels per wheel notch
    wheel_zoom_step: float = 0.1   # magnification per notch with ctrl held

    @classmethod
    def load(cls, settings: QSettings) -> "CanvasSettings":
        defaults = cls()
        return cls(
            border_ratio=float(settings.value("canvas/border_ratio", defaults.border_ratio, type=float)),
            wheel_pan_step=float(settings.value("canvas/wheel_pan_step", defaults.wheel_pan_step, type=float)),
            wheel_zoom_step=float(settings.value("canvas/wheel_zoom_step", defaults.wheel_zoom_step, type=float)),
        )

    def save(self, settings: QSettings):
        settings.setValue("canvas/border_ratio", self.border_ratio)
        settings.setValue("canvas/wheel_pan_step", self.wheel_pan_step)
        settings.setValue("canvas/wheel_zoom_step", self.wheel_zoom_step)
