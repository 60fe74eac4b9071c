# core/event_bus.py
"""
Реестр подписок на push-события backend'а

Обработчики вызываются синхронно, в порядке регистрации, в потоке того,
кто вызвал emit(). Буферизации нет: событие без подписчиков теряется.
Исключение в одном обработчике логируется и не мешает остальным.
"""

import logging
import threading
from typing import Any, Callable, Dict, List

logger = logging.getLogger(__name__)

# Топики push-канала
TOPIC_CORE_STATUS = "core:status"
TOPIC_TRAFFIC = "stats:traffic"
TOPIC_CORE_LOG = "core:log"
TOPIC_UPDATE_PROGRESS = "update:progress"
TOPIC_NOTIFICATION = "notification"

EventCallback = Callable[[Any], None]


class _Binding:
    """Одна живая пара (topic, callback) в реестре; держится, пока есть хоть один handle"""

    def __init__(self, topic: str, callback: EventCallback):
        self.topic = topic
        self.callback = callback
        self.handles = 0
        self.active = True


class Subscription:
    """Handle одной регистрации; вызов объекта отменяет её"""

    def __init__(self, bus: "EventBus", binding: _Binding):
        self.topic = binding.topic
        self.callback = binding.callback
        self._bus = bus
        self._binding = binding
        self._cancelled = False

    @property
    def active(self) -> bool:
        return not self._cancelled and self._binding.active

    def cancel(self):
        """Отменяет эту регистрацию (повторный вызов ничего не делает)"""
        if not self._cancelled:
            self._cancelled = True
            self._bus._release(self._binding)

    __call__ = cancel

    def __repr__(self):
        state = "active" if self.active else "cancelled"
        return f"<Subscription {self.topic} {state}>"


class SubscriptionScope:
    """Группа подписок с общим временем жизни (например, пока виден наблюдатель)"""

    def __init__(self, bus: "EventBus"):
        self.bus = bus
        self.subscriptions: List[Subscription] = []

    def subscribe(self, topic: str, callback: EventCallback) -> Subscription:
        return self.add(self.bus.subscribe(topic, callback))

    def add(self, subscription: Subscription) -> Subscription:
        self.subscriptions.append(subscription)
        return subscription

    def close(self):
        for subscription in self.subscriptions:
            subscription.cancel()
        self.subscriptions.clear()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()


class EventBus:
    def __init__(self):
        self._lock = threading.RLock()
        self._bindings: Dict[str, List[_Binding]] = {}

    def subscribe(self, topic: str, callback: EventCallback) -> Subscription:
        """
        Регистрирует обработчик топика

        Повторная регистрация той же пары (topic, callback) не создает второй
        вызов на событие, но возвращает отдельный handle: пара снимается
        только после отмены всех своих handle'ов.
        """
        with self._lock:
            bucket = self._bindings.setdefault(topic, [])
            for existing in bucket:
                if existing.callback == callback:
                    binding = existing
                    break
            else:
                binding = _Binding(topic, callback)
                bucket.append(binding)
                logger.debug(f"➕ Подписка на {topic} ({len(bucket)} всего)")

            binding.handles += 1
            return Subscription(self, binding)

    def _release(self, binding: _Binding):
        with self._lock:
            binding.handles -= 1
            if binding.handles > 0 or not binding.active:
                return

            binding.active = False
            bucket = self._bindings.get(binding.topic)
            if bucket:
                for i, existing in enumerate(bucket):
                    if existing is binding:
                        bucket.pop(i)
                        break
                if not bucket:
                    self._bindings.pop(binding.topic, None)

        logger.debug(f"➖ Отписка от {binding.topic}")

    def emit(self, topic: str, payload: Any = None) -> int:
        """Доставляет событие всем подписчикам топика, возвращает число вызовов"""
        with self._lock:
            bindings = list(self._bindings.get(topic, ()))

        delivered = 0
        for binding in bindings:
            # подписку могли отменить из предыдущего обработчика
            if not binding.active:
                continue
            try:
                binding.callback(payload)
                delivered += 1
            except Exception:
                logger.exception(f"❌ Обработчик события {topic} завершился ошибкой")

        return delivered

    def subscriber_count(self, topic: str) -> int:
        with self._lock:
            return len(self._bindings.get(topic, ()))

    def scope(self) -> SubscriptionScope:
        return SubscriptionScope(self)

    def close(self):
        """Отменяет все подписки (при завершении приложения)"""
        with self._lock:
            bindings = [b for bucket in self._bindings.values() for b in bucket]
            self._bindings.clear()
            for binding in bindings:
                binding.active = False

        logger.info(f"🧹 EventBus закрыт, отменено подписок: {len(bindings)}")


def iter_payload(payload: Any):
    """Событие может прийти одиночным значением или пачкой (списком)"""
    if isinstance(payload, (list, tuple)):
        yield from payload
    elif payload is not None:
        yield payload
