"""
ERROS DE DOMÍNIO
=================

Os serviços levantam estas exceções; o handler registrado em
`odontocrm.api.main` converte cada uma no status HTTP correspondente,
sempre com o corpo `{"detail": mensagem}`.
"""


class DomainError(Exception):
    """Erro de regra de negócio (400 por padrão)."""

    status_code = 400

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(DomainError):
    """Dados inválidos que passaram pelo schema (ex: data mal formatada)."""

    status_code = 400


class UnauthorizedError(DomainError):
    status_code = 401


class ForbiddenError(DomainError):
    """Usuário autenticado sem permissão para a ação."""

    status_code = 403


class NotFoundError(DomainError):
    """Recurso não existe ou pertence a outra company."""

    status_code = 404


class ConflictError(DomainError):
    status_code = 409
