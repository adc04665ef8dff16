"""Building blocks for group-chat bot features: reminders and their scheduling, picture pools and stores, MIDI ear training, and small web-service and group-management helpers."""

__version__ = "0.1.0"