import structlog

from ..data.models import CardIssueReport
from ..data.repos import get_card

logger = structlog.get_logger()


def report_issue(user_id, card_id, description):
    card = get_card(user_id, card_id)
    report = CardIssueReport.objects.create(user_id=user_id, card=card, description=description)
    logger.info("card_issue_reported",
        user_id=str(user_id),
        card_id=str(card.id),
        report_id=str(report.id),
    )
    return report


def list_issues(user_id, card_id):
    card = get_card(user_id, card_id)
    return list(CardIssueReport.objects.filter(card=card, user_id=user_id).order_by("-created_at"))
