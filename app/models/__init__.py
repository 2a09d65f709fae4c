# app/models/__init__.py
from app.models.client_models import Client
from app.models.staff_models import SalesRep, Supervisor
from app.models.quotation_models import Quotation, QuotationProduct
from app.models.driver_models import Driver
from app.models.order_models import Order, OrderLocation
