# Import every model so Base.metadata is complete (alembic, create_all)
from reflet.models.auth import User, UserRole  # noqa: F401
from reflet.models.catalog import GalleryImage, Product, Project  # noqa: F401
from reflet.models.content import SiteContent  # noqa: F401
from reflet.models.messages import ContactMessage  # noqa: F401
from reflet.models.pages import PageSetting  # noqa: F401
