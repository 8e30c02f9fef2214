# backend/app/services/errores.py


class ReportError(Exception):
    """Base de los errores del motor de informes."""


class ReportValidationError(ReportError):
    """Datos de entrada inválidos: se detectan antes de tocar el ledger."""


class InvalidPeriod(ReportValidationError):
    def __init__(self, period):
        super().__init__(f'Período inválido: {period!r}. Use "weekly" o "monthly"')
        self.period = period


class InvalidDateFormat(ReportValidationError):
    def __init__(self, value):
        super().__init__(f"Fecha inválida: {value!r}. Formato esperado YYYY-MM-DD")
        self.value = value


class InvalidRangeOrder(ReportValidationError):
    def __init__(self, start_date: str, end_date: str):
        super().__init__(f"startDate ({start_date}) no puede ser posterior a endDate ({end_date})")
        self.start_date = start_date
        self.end_date = end_date


class UserNotFound(ReportError):
    def __init__(self, user_id):
        super().__init__(f"Usuario {user_id} no encontrado")
        self.user_id = user_id


class LedgerUnavailable(ReportError):
    pass


class RenderFailure(ReportError):
    pass
