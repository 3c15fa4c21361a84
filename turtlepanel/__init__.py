"""Status panel and control client for an AFC filament changer on Moonraker,
with drivers for its touch, backlight and LCD controllers."""

__version__ = "0.1.0"