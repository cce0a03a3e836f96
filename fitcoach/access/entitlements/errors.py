from sqlalchemy.exc import SQLAlchemyError

# Failures of the backing store; never shown to callers verbatim.
STORE_ERRORS: tuple[type[BaseException], ...] = (SQLAlchemyError, OSError, TimeoutError)


class AccessError(Exception):
    pass


class AccessStoreError(AccessError):
    pass
