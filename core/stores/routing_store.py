# core/stores/routing_store.py
from core.models import RoutingItem
from core.stores.base import ResourceStore


class RoutingStore(ResourceStore):
    """Наборы правил маршрутизации"""

    item_type = RoutingItem
    list_method = "GetRoutings"
    add_method = "AddRouting"
    update_method = "UpdateRouting"
    delete_method = "DeleteRouting"
    set_active_method = "SetActiveRouting"
