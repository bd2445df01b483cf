"""Account lookup by client certificate."""

import datetime as dt

from sqlmodel import Session, select

from .logging import get_logger
from .models import Account

logger = get_logger(__name__)


def get_or_create_account(session: Session, fingerprint: str) -> Account:
    """Get the account for a certificate fingerprint, creating it on first visit."""
    account = session.exec(
        select(Account).where(Account.fingerprint == fingerprint)
    ).first()

    if account:
        account.last_seen = dt.datetime.now(dt.UTC)
        logger.debug("account_accessed", fingerprint=fingerprint)
    else:
        account = Account(fingerprint=fingerprint)
        session.add(account)
        logger.info("account_created", fingerprint=fingerprint)

    session.commit()
    session.refresh(account)
    return account
