class DecodeError(ValueError):
    pass


class UnknownCurveTypeError(DecodeError):
    pass


class AccountResolutionError(DecodeError):
    pass
