"""
https://python-dependency-injector.ets-labs.org/index.html
https://python-dependency-injector.ets-labs.org/examples/fastapi-sqlalchemy.html
"""

from dependency_injector import containers, providers

from src.platform.database.orm_db_setting import Database
from src.platform.database.unit_of_work import SqlAlchemyUnitOfWork
from src.platform.payment.mercado_pago_client import MercadoPagoClient
from src.platform.state.scheduler_lock import SchedulerLock
from src.service.settlement.app.command.settle_due_payouts_use_case import (
    SettleDuePayoutsUseCase,
)
from src.service.settlement.driven_adapter.gateway.mercado_pago_transfer_gateway_impl import (
    MercadoPagoTransferGatewayImpl,
)
from src.service.settlement.driven_adapter.repo.producer_account_query_repo_impl import (
    ProducerAccountQueryRepoImpl,
)
from src.service.ticketing.app.command.expire_tickets_use_case import ExpireTicketsUseCase
from src.service.ticketing.app.service.ticket_ledger import TicketLedger
from src.service.ticketing.driven_adapter.gateway.mercado_pago_payment_gateway_impl import (
    MercadoPagoPaymentGatewayImpl,
)
from src.service.ticketing.driven_adapter.notification.log_notification_sender_impl import (
    LogNotificationSenderImpl,
)


class Container(containers.DeclarativeContainer):
    # Database (event-loop-aware engine behind AsyncEngineManager)
    database = providers.Singleton(Database)

    # One transaction per unit of work; use cases get a fresh one per request/tick
    unit_of_work = providers.Factory(
        SqlAlchemyUnitOfWork, session_factory=database.provided.new_session
    )

    # Payment processor
    payment_client = providers.Singleton(MercadoPagoClient)
    payment_gateway = providers.Singleton(MercadoPagoPaymentGatewayImpl, client=payment_client)
    transfer_gateway = providers.Singleton(MercadoPagoTransferGatewayImpl, client=payment_client)

    # Collaborators
    notification_sender = providers.Singleton(LogNotificationSenderImpl)
    producer_account_query_repo = providers.Singleton(
        ProducerAccountQueryRepoImpl, session_factory=database.provided.session
    )

    # Domain services
    ticket_ledger = providers.Singleton(TicketLedger)

    # Background jobs
    scheduler_lock = providers.Singleton(
        SchedulerLock, session_factory=database.provided.new_session
    )
    expire_tickets_use_case = providers.Factory(
        ExpireTicketsUseCase, uow=unit_of_work, ticket_ledger=ticket_ledger
    )
    settle_due_payouts_use_case = providers.Factory(
        SettleDuePayoutsUseCase,
        uow=unit_of_work,
        producer_account_query_repo=producer_account_query_repo,
        transfer_gateway=transfer_gateway,
    )


container = Container()
