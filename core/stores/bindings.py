# core/stores/bindings.py
"""
Привязки push-топиков к сторам

Каждая функция возвращает подписку; её отмена прекращает обновление
стора, даже если событие уже в пути.
"""

from core.event_bus import (
    TOPIC_CORE_LOG, TOPIC_CORE_STATUS, TOPIC_NOTIFICATION, TOPIC_TRAFFIC,
    TOPIC_UPDATE_PROGRESS, EventBus, Subscription, SubscriptionScope,
)
from core.stores.app_store import AppStore
from core.stores.log_store import LogStore


def bind_core_status(bus: EventBus, app_store: AppStore) -> Subscription:
    return bus.subscribe(TOPIC_CORE_STATUS, app_store.on_core_status_event)


def bind_traffic(bus: EventBus, app_store: AppStore) -> Subscription:
    return bus.subscribe(TOPIC_TRAFFIC, app_store.on_traffic_event)


def bind_update_progress(bus: EventBus, app_store: AppStore) -> Subscription:
    return bus.subscribe(TOPIC_UPDATE_PROGRESS, app_store.on_update_progress_event)


def bind_notifications(bus: EventBus, app_store: AppStore) -> Subscription:
    return bus.subscribe(TOPIC_NOTIFICATION, app_store.on_notification_event)


def bind_core_log(bus: EventBus, log_store: LogStore) -> Subscription:
    return bus.subscribe(TOPIC_CORE_LOG, log_store.on_log_event)


def bind_all(bus: EventBus, app_store: AppStore, log_store: LogStore) -> SubscriptionScope:
    """Все привязки сразу; scope.close() снимает их разом"""
    scope = bus.scope()
    scope.add(bind_core_status(bus, app_store))
    scope.add(bind_traffic(bus, app_store))
    scope.add(bind_update_progress(bus, app_store))
    scope.add(bind_notifications(bus, app_store))
    scope.add(bind_core_log(bus, log_store))
    return scope
