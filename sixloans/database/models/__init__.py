from sixloans.database.models.user_model import User
from sixloans.database.models.product_model import Category, Product
from sixloans.database.models.application_model import Application, ApplicationDocumentLink, Counter

DOCUMENT_MODELS = [User, Category, Product, Application, Counter]

__all__ = [
    "User",
    "Category",
    "Product",
    "Application",
    "ApplicationDocumentLink",
    "Counter",
    "DOCUMENT_MODELS",
]
