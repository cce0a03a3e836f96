class RedeemError(Exception):
    pass


class RedeemCodeNotFoundError(RedeemError):
    pass


class RedeemCodeExhaustedError(RedeemError):
    pass


class RedeemCodeAlreadyUsedError(RedeemError):
    pass


class RedeemBannedError(RedeemError):
    pass


class CodeScopeError(ValueError):
    pass
