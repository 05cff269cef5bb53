"""Enums - valores fixos que se repetem no sistema."""

from enum import Enum


class UserRole(str, Enum):
    """Nível de acesso do usuário."""
    SUPER_ADMIN = "SUPER_ADMIN"  # Equipe da plataforma - acesso total
    ADMIN = "ADMIN"              # Admin da clínica (company)
    MANAGER = "MANAGER"          # Gestor de uma ou mais unidades
    WORKER = "WORKER"            # Atendimento / comercial
    DENTIST = "DENTIST"          # Dentista


class UserSpecialty(str, Enum):
    """Especialidade comercial do colaborador."""
    GENERAL = "GENERAL"
    CLOSER_NEGOCIACAO = "CLOSER_NEGOCIACAO"
    CLOSER_FOLLOW = "CLOSER_FOLLOW"


class StatusVenda(str, Enum):
    """Posição do lead no processo de venda."""
    QUALIFICANDO = "QUALIFICANDO"
    INTERESSE_DEMONSTRADO = "INTERESSE_DEMONSTRADO"
    CONSULTA_AGENDADA = "CONSULTA_AGENDADA"
    CONSULTA_REALIZADA = "CONSULTA_REALIZADA"
    ORCAMENTO_ENVIADO = "ORCAMENTO_ENVIADO"
    NEGOCIACAO = "NEGOCIACAO"
    GANHO = "GANHO"
    PERDIDO = "PERDIDO"
    PAUSADO = "PAUSADO"


class TaskStatus(str, Enum):
    """Status da tarefa."""
    PENDING = "PENDING"
    COMPLETED = "COMPLETED"
    EXPIRED = "EXPIRED"
    CANCELLED = "CANCELLED"


# Tarefas que ainda "prendem" o responsável (bloqueiam exclusão do usuário)
OPEN_TASK_STATUSES = (TaskStatus.PENDING.value, TaskStatus.EXPIRED.value)


class PagamentoStatus(str, Enum):
    """Status de um pagamento/parcela."""
    PENDENTE = "PENDENTE"
    PAGO = "PAGO"
    ATRASADO = "ATRASADO"
    CANCELADO = "CANCELADO"


class FormaPagamento(str, Enum):
    DINHEIRO = "DINHEIRO"
    CARTAO_DEBITO = "CARTAO_DEBITO"
    CARTAO_CREDITO = "CARTAO_CREDITO"
    PIX = "PIX"
    BOLETO = "BOLETO"
    TRANSFERENCIA = "TRANSFERENCIA"


class ToothStatus(str, Enum):
    """Situação de um dente no odontograma."""
    HIGIDO = "HIGIDO"                      # Saudável
    CARIE = "CARIE"
    RESTAURADO = "RESTAURADO"
    AUSENTE = "AUSENTE"
    TRATAMENTO_CANAL = "TRATAMENTO_CANAL"
    EXTRACAO_INDICADA = "EXTRACAO_INDICADA"
    IMPLANTE = "IMPLANTE"
    COROA = "COROA"
