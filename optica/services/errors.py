from __future__ import annotations


class ServiceError(ValueError):
    """Base das falhas de regra de negócio (mensagem legível para o usuário)."""


class NotFoundError(ServiceError):
    pass


class ConflictError(ServiceError):
    """Conflito de unicidade ou escrita concorrente; o cliente pode tentar de novo."""


class ValidationError(ServiceError):
    pass
