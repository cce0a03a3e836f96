class GrantError(Exception):
    pass


class GrantNotFoundError(GrantError):
    pass
