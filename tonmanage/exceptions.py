class TonManageError(Exception):
    pass


class CellError(TonManageError):
    pass


class OutOfCapacity(CellError):
    """Value does not fit into the requested bit width."""


class CapacityExceeded(OutOfCapacity):
    """Cell bit buffer is exhausted."""


class TooManyReferences(CellError):
    pass


class CellUnderflow(CellError):
    pass


class BocError(CellError):
    pass


class InvalidAddress(TonManageError, ValueError):
    pass


class ContractError(TonManageError):
    pass


class MissingPublicKey(ContractError):
    pass


class UnsupportedOperation(ContractError):
    pass


class InsufficientBalance(TonManageError):
    pass


class KeyStoreError(TonManageError):
    pass


class MnemonicNotFound(KeyStoreError):
    pass


class InvalidMnemonic(KeyStoreError):
    pass


class RemoteError(TonManageError):
    def __init__(self, code, message):
        super().__init__(f"code: {code}, message: {message}")
        self.code = code
        self.message = message


class GetMethodError(RemoteError):
    def __init__(self, method, exit_code, message=None):
        super().__init__(exit_code, message or f"get method {method} failed with exit code {exit_code}")
        self.method = method
        self.exit_code = exit_code


class ConfigError(TonManageError):
    pass
