import logging
from sqlalchemy import update
from sqlalchemy.orm import Session

from eduportal_backend.model.grading import Term

logger = logging.getLogger(__name__)


def set_current_term(db: Session, tenant_id: str, term: Term) -> Term:
    """
    Make ``term`` the only current term of its tenant.

    Clearing the other flags and setting the new one happen in the same
    transaction, so a reader never sees two current terms.
    """
    try:
        db.execute(
            update(Term)
            .where(Term.tenant_id == tenant_id, Term.id != term.id, Term.is_current == True)
            .values(is_current=False)
            .execution_options(synchronize_session="fetch")
        )
        term.is_current = True
        db.commit()
    except Exception:
        db.rollback()
        raise

    db.refresh(term)
    logger.info(f"Term {term.id} is now current for tenant {tenant_id}")
    return term
