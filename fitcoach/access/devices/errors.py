class DeviceTrackError(Exception):
    pass


class DeviceTrackBannedError(DeviceTrackError):
    pass


class DeviceTrackTooManyDevicesError(DeviceTrackError):
    def __init__(self, *, device_count: int, max_devices: int) -> None:
        super().__init__(f"{device_count} devices exceed the limit of {max_devices}")
        self.device_count = device_count
        self.max_devices = max_devices
