"""
Exceções de Domínio da plataforma de operações de campo.

Este módulo define exceções específicas do domínio que permitem
comunicar erros de forma clara e tipada entre as camadas.

Hierarquia:
    DomainException (base)
    ├── ValidationError (rascunho ou valor inválido)
    ├── EntityNotFoundError (entidade não existe)
    ├── ConflictError (unicidade violada)
    └── BusinessRuleViolationError (regra de negócio violada)

Todas as falhas são locais e recuperáveis: uma mutação que levanta
qualquer uma destas exceções deixa a coleção exatamente como estava.
"""


class DomainException(Exception):
    """
    Exceção base para todos os erros de domínio.

    Example:
        try:
            assign_service.execute(ticket_id, "tech-3")
        except DomainException as e:
            logger.error(f"Erro de domínio: {e}")
    """

    def __init__(self, message: str, code: str = None):
        self.message = message
        self.code = code or self.__class__.__name__
        super().__init__(self.message)

    def __str__(self) -> str:
        return f"[{self.code}] {self.message}"

    def to_dict(self) -> dict:
        """Serializa exceção para dicionário."""
        return {
            "error": self.code,
            "message": self.message,
        }


class ValidationError(DomainException):
    """
    Erro de validação de dados de entrada.

    Lançada pelo próprio store quando um rascunho não tem os campos
    de identificação obrigatórios, ou quando um valor está fora do
    domínio permitido.

    Example:
        if not draft.client_name:
            raise ValidationError("Nome do cliente é obrigatório", field="client_name")
    """

    def __init__(self, message: str, field: str = None):
        self.field = field
        code = f"VALIDATION_ERROR_{field.upper()}" if field else "VALIDATION_ERROR"
        super().__init__(message, code)

    def to_dict(self) -> dict:
        result = super().to_dict()
        if self.field:
            result["field"] = self.field
        return result


class EntityNotFoundError(DomainException):
    """
    Entidade não encontrada na coleção.

    Lançada por update/assign/convert quando o ID não existe.
    Delete de um ID inexistente NÃO lança (é no-op).
    """

    def __init__(self, message: str, entity_type: str = None, entity_id: str = None):
        self.entity_type = entity_type
        self.entity_id = entity_id
        super().__init__(message, "ENTITY_NOT_FOUND")

    def to_dict(self) -> dict:
        result = super().to_dict()
        if self.entity_type:
            result["entity_type"] = self.entity_type
        if self.entity_id:
            result["entity_id"] = self.entity_id
        return result


class ConflictError(DomainException):
    """
    Violação de unicidade.

    Casos:
    - slug de template duplicado
    - segundo formulário não rejeitado para o mesmo par
      (ordem de trabalho, template)
    """

    def __init__(self, message: str, resource: str = None):
        self.resource = resource
        super().__init__(message, "CONFLICT")

    def to_dict(self) -> dict:
        result = super().to_dict()
        if self.resource:
            result["resource"] = self.resource
        return result


class BusinessRuleViolationError(DomainException):
    """
    Violação de regra de negócio.

    Lançada quando uma operação viola uma regra do domínio,
    tipicamente uma transição de status não permitida.

    Example:
        if ticket.status == TicketStatus.CLOSED:
            raise BusinessRuleViolationError(
                "Não é possível atribuir ticket fechado",
                rule="closed_ticket_immutable",
            )
    """

    def __init__(self, message: str, rule: str = None):
        self.rule = rule
        super().__init__(message, "BUSINESS_RULE_VIOLATION")

    def to_dict(self) -> dict:
        result = super().to_dict()
        if self.rule:
            result["rule"] = self.rule
        return result
