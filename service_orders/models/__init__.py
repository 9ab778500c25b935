# service_orders/models/__init__.py
from .orders import ServiceOrder, OrderStatus, Priority
from .history import StatusHistory, OperatorAction
from .checklists import ChecklistItem, ServiceOrderChecklist
