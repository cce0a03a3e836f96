from fitcoach.access.devices.service import DeviceTracker

__all__ = ["DeviceTracker"]
