"""
Errors — Иерархия исключений pre-sale движка

Каждая ошибка означает полный откат вызова: ни частичного изменения ledger,
ни частичного перевода средств, ни частичного обновления тиров.
Единственное задокументированное исключение — BulkExchangeInterrupted.
"""


class PresaleError(Exception):
    """Базовое исключение pre-sale движка."""


class InsufficientBalance(PresaleError):
    """Баланс держателя меньше запрошенного количества."""

    def __init__(self, holder: str, balance: int, requested: int):
        self.holder = holder
        self.balance = balance
        self.requested = requested
        super().__init__(
            f"Insufficient balance for {holder}: balance={balance}, requested={requested}"
        )


class Overflow(PresaleError):
    """Результат превышает целочисленное представление (uint256)."""


class RateUninitialized(PresaleError):
    """Курс ещё не получен от оракула (rate == 0), продажа отключена."""


class NothingPurchasable(PresaleError):
    """Платёж не покрывает ни одного токена — платёж отклонён целиком."""


class UnauthorizedCallback(PresaleError):
    """
    Callback пришёл не от доверенного адреса оракула.

    Единственная аутентификация в системе: принятие поддельного callback
    позволило бы установить произвольный курс.
    """

    def __init__(self, sender: str):
        self.sender = sender
        super().__init__(f"Callback from untrusted sender: {sender}")


class InvalidPriceResult(PresaleError, ValueError):
    """Ответ оракула не разбирается в положительный курс."""


class Unauthorized(PresaleError):
    """Операция доступна только владельцу."""

    def __init__(self, caller: str, operation: str):
        self.caller = caller
        self.operation = operation
        super().__init__(f"{operation} is owner-only, caller={caller}")


class TransferFailed(PresaleError):
    """Исходящий перевод средств не может быть доставлен получателю."""

    def __init__(self, recipient: str, amount: int):
        self.recipient = recipient
        self.amount = amount
        super().__init__(f"Funds transfer of {amount} to {recipient} failed")


class ContractDestroyed(PresaleError):
    """Контракт уничтожен (kill), изменяющие вызовы запрещены."""


class BulkExchangeInterrupted(PresaleError):
    """
    Bulk exchange прерван на одном из держателей.

    Batch не атомарен: уже обработанные держатели остаются обнулёнными.
    `report` содержит частичный результат, `holder` — держатель, на котором
    произошёл сбой.
    """

    def __init__(self, holder: str, report, cause: Exception):
        self.holder = holder
        self.report = report
        self.cause = cause
        super().__init__(
            f"Bulk exchange interrupted at {holder} after "
            f"{len(report.credited)} holders: {cause}"
        )
