from errors.exceptions import RegistryError, InvalidArgumentError, BalanceReadError, TransferError

__all__ = ["RegistryError", "InvalidArgumentError", "BalanceReadError", "TransferError"]
