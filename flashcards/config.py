from datetime import timedelta

# AI generation quota
QUOTA_LIMIT = 15
QUOTA_WINDOW = timedelta(hours=24)
PROMPT_MAX_LENGTH = 10_000

# Leitner boxes
MIN_BOX = 1
MAX_BOX = 3
BOX_INTERVALS = {
    1: timedelta(days=1),
    2: timedelta(days=3),
    3: timedelta(days=7),   # longest
}

# Field limits
DECK_NAME_MAX_LENGTH = 100
DECK_DESCRIPTION_MAX_LENGTH = 500
QUESTION_MAX_LENGTH = 1000
ANSWER_MAX_LENGTH = 2000
ISSUE_DESCRIPTION_MAX_LENGTH = 1000

# Pagination
DEFAULT_PAGE_LIMIT = 20
MAX_PAGE_LIMIT = 100
