from src.cms.db.base import Base  # noqa

from .news_models import News  # noqa
