# ==============================================================================
# TABLERO DE PEDIDOS (KANBAN) CON ACTUALIZACIÓN OPTIMISTA
# ==============================================================================
# El tablero combina dos fuentes:
#   - snapshot remoto: última lista entregada por el listener de pedidos
#   - overlay pendiente: cambios de estado aplicados localmente
#
# Un cambio de estado se ve en el tablero de inmediato y la escritura se
# encola en un hilo de escritura en segundo plano (write-behind). Cuando
# llega un snapshot remoto nuevo, el snapshot gana y el overlay se vacía.
#
# No hay precondición sobre el estado guardado: la última escritura gana.
# Si una escritura falla, el error se reporta y el overlay NO se revierte;
# el tablero queda divergente hasta el siguiente snapshot.
# ==============================================================================

import threading
from datetime import datetime
from queue import Queue
from typing import Any, Callable, Dict, List, Optional, Tuple

from app_pedidos.models.entities import Order, ShopSettings
from app_pedidos.repositories.base import SERVER_TIMESTAMP
from app_pedidos.repositories.order_repository import OrderRepository
from app_pedidos.services.audit_service import AuditService
from app_pedidos.services.order_filters import filter_orders
from app_pedidos.services.order_flow import (
    KANBAN_COLUMNS, action_label, allowed_targets, build_status_update,
    coerce_status, next_status, prev_status, status_label
)
from app_pedidos.services.order_service import sort_newest_first


# (order_id, update, estado_previo, error) → None; error es None si la escritura se aplicó
WriteCallback = Callable[[str, Dict[str, Any], str, Optional[str]], None]


class StatusWriter:
    """
    Cola de escritura de cambios de estado (no bloquea la petición).

    Cada cambio encolado se escribe en el orden de llegada, sin reintentos.
    """

    def __init__(self, order_repo: OrderRepository, on_done: WriteCallback = None):
        self.order_repo = order_repo
        self.on_done = on_done
        self._write_queue: Queue = Queue()
        self._writer_thread: Optional[threading.Thread] = None
        self._lock = threading.Lock()

    def _start_writer(self) -> None:
        """Inicia el hilo de escritura si no está corriendo."""
        with self._lock:
            if self._writer_thread is None or not self._writer_thread.is_alive():
                self._writer_thread = threading.Thread(target=self._writer_loop, daemon=True)
                self._writer_thread.start()

    def _writer_loop(self) -> None:
        while True:
            item = self._write_queue.get()
            try:
                if item is None:  # Señal de cierre
                    break
                order_id, update, previous = item
                self._write(order_id, update, previous)
            finally:
                self._write_queue.task_done()

    def _write(self, order_id: str, update: Dict[str, Any], previous: str) -> None:
        error = None
        try:
            if not self.order_repo.update_status(order_id, update):
                error = 'Pedido no encontrado'
        except Exception as e:
            error = str(e) or e.__class__.__name__
        if self.on_done:
            self.on_done(order_id, update, previous, error)

    def submit(self, order_id: str, update: Dict[str, Any], previous: str = '') -> None:
        """Encola la escritura de un cambio de estado."""
        self._start_writer()
        self._write_queue.put((order_id, update, previous))

    def flush(self) -> None:
        """Espera a que se escriban todos los cambios encolados."""
        self._write_queue.join()

    def stop(self) -> None:
        if self._writer_thread is not None and self._writer_thread.is_alive():
            self._write_queue.put(None)
            self._writer_thread.join(timeout=2)


class OrderBoard:
    """
    Tablero kanban de una sesión de administrador.

    Responsabilidades:
    - Mantener el snapshot remoto (suscripción a la colección de pedidos)
    - Aplicar cambios de estado optimistas (overlay)
    - Encolar las escrituras y reportar fallos
    - Agrupar la vista filtrada en columnas
    """

    MAX_ERRORS = 50

    def __init__(
        self,
        order_repo: OrderRepository,
        audit_service: AuditService = None,
        persist: bool = True,
        user: str = ''
    ):
        """
        Inicializa el tablero.

        Args:
            order_repo: Repositorio de pedidos (fuente del snapshot)
            audit_service: Servicio de auditoría (cambios aplicados)
            persist: False = solo cambio local, sin escritura
            user: Sesión dueña del tablero
        """
        self.order_repo = order_repo
        self.audit_service = audit_service
        self.persist = persist
        self.user = user
        self._lock = threading.RLock()
        self._snapshot: Dict[str, Dict[str, Any]] = {}
        self._overlay: Dict[str, Dict[str, Any]] = {}
        self._errors: List[Dict[str, Any]] = []
        self._unsubscribe: Optional[Callable[[], None]] = None
        self._writer = StatusWriter(order_repo, on_done=self._on_write_done)

    # =========================================================================
    # SNAPSHOT REMOTO
    # =========================================================================

    def start(self) -> 'OrderBoard':
        """Suscribe el tablero al listener de pedidos (entrega el snapshot inicial)."""
        if self._unsubscribe is None:
            self._unsubscribe = self.order_repo.subscribe(self.on_snapshot)
        return self

    def on_snapshot(self, documents: List[Tuple[str, Dict[str, Any]]]) -> None:
        """Un snapshot remoto nuevo reemplaza al anterior y vacía el overlay."""
        with self._lock:
            self._snapshot = {doc_id: dict(data) for doc_id, data in documents}
            self._overlay = {}

    # =========================================================================
    # VISTA COMBINADA
    # =========================================================================

    def _merged(self, order_id: str) -> Optional[Dict[str, Any]]:
        data = self._snapshot.get(order_id)
        if data is None:
            return None
        pending = self._overlay.get(order_id)
        return {**data, **pending} if pending else data

    def orders(self) -> List[Order]:
        """Pedidos como los ve el tablero (overlay sobre snapshot), más recientes primero."""
        with self._lock:
            merged = [Order.from_dict(doc_id, self._merged(doc_id)) for doc_id in self._snapshot]
        return sort_newest_first(merged)

    def get(self, order_id: str) -> Optional[Order]:
        with self._lock:
            data = self._merged(order_id)
        return Order.from_dict(order_id, data) if data else None

    def has_pending(self, order_id: str) -> bool:
        with self._lock:
            return order_id in self._overlay

    # =========================================================================
    # CAMBIOS DE ESTADO
    # =========================================================================

    def advance(self, order_id: str, target_status: Any, now: Optional[datetime] = None) -> Dict[str, Any]:
        """
        Mueve un pedido al estado siguiente o anterior.

        El cambio se aplica al overlay antes de cualquier escritura y la
        escritura se encola. Dos avances seguidos generan dos escrituras.

        Args:
            order_id: ID del pedido
            target_status: Estado destino (debe ser next o prev del actual)
            now: Hora de la transición (por defecto, ahora en UTC)

        Returns:
            Dict con ok, order (vista optimista) y persisted; u ok=False
        """
        target = coerce_status(target_status)
        if target is None:
            return {'ok': False, 'error': 'Estado inválido'}

        with self._lock:
            current = self.get(order_id)
            if current is None:
                return {'ok': False, 'error': 'Pedido no encontrado'}
            if target not in (next_status(current.status), prev_status(current.status)):
                return {
                    'ok': False,
                    'error': (f"No se puede pasar de {status_label(current.status)} "
                              f"a {status_label(target)}"),
                }
            update = build_status_update(target, now)
            pending = dict(self._overlay.get(order_id, {}))
            pending.update(update)
            self._overlay[order_id] = pending
            previous_status = current.status.value

        if self.persist:
            # El store sella los timestamps con su propia hora
            stored = {key: (value if key == 'status' else SERVER_TIMESTAMP) for key, value in update.items()}
            self._writer.submit(order_id, stored, previous_status)

        return {
            'ok': True,
            'order': self.get(order_id).to_public_dict(),
            'persisted': self.persist,
        }

    def _on_write_done(self, order_id: str, update: Dict[str, Any], previous: str, error: Optional[str]) -> None:
        if error:
            print(f"[ERROR] No se pudo actualizar el pedido {order_id[:5]}: {error}")
            with self._lock:
                self._errors.append({
                    'order_id': order_id,
                    'status': update.get('status'),
                    'error': error,
                })
                del self._errors[:-self.MAX_ERRORS]
            return
        if self.audit_service:
            self.audit_service.log_status_change(self.user, order_id, previous, update.get('status', ''))

    @property
    def errors(self) -> List[Dict[str, Any]]:
        with self._lock:
            return list(self._errors)

    def pop_errors(self) -> List[Dict[str, Any]]:
        """Devuelve y limpia los errores de escritura (para el toast)."""
        with self._lock:
            errors, self._errors = self._errors, []
        return errors

    # =========================================================================
    # COLUMNAS
    # =========================================================================

    def columns(self, filter_mode: Any, settings: ShopSettings, now: Optional[datetime] = None) -> Dict[str, Any]:
        """
        Agrupa la vista filtrada en las columnas del kanban.

        Args:
            filter_mode: Modo de filtro (current-shift, today, last-7-days, all)
            settings: Estado de la tienda
            now: Hora de referencia

        Returns:
            Dict con mode, no_active_shift y columns
            [{status, label, action_label, orders}]
        """
        result = filter_orders(self.orders(), filter_mode, settings, now)
        columns = []
        for status in KANBAN_COLUMNS:
            in_column = [o for o in result.orders if o.status == status]
            columns.append({
                'status': status.value,
                'label': status_label(status),
                'action_label': action_label(status),
                'orders': [self._card(o) for o in in_column],
            })
        return {
            'mode': result.mode.value,
            'no_active_shift': result.no_active_shift,
            'columns': columns,
        }

    def _card(self, order: Order) -> Dict[str, Any]:
        card = order.to_public_dict()
        card['short_id'] = order.short_id
        card['allowed_targets'] = [s.value for s in allowed_targets(order.status)]
        card['pending_write'] = self.has_pending(order.id)
        return card

    # =========================================================================
    # CICLO DE VIDA
    # =========================================================================

    def flush(self) -> None:
        self._writer.flush()

    def close(self) -> None:
        """Cancela la suscripción y detiene el hilo de escritura."""
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None
        self._writer.stop()


class BoardRegistry:
    """Un tablero por sesión de administrador."""

    def __init__(self, factory: Callable[[str], OrderBoard]):
        """
        Args:
            factory: Crea un tablero para un usuario (sin iniciar)
        """
        self._factory = factory
        self._boards: Dict[str, OrderBoard] = {}
        self._lock = threading.Lock()

    def get(self, key: str, user: str = '') -> OrderBoard:
        """Obtiene (o crea e inicia) el tablero de una sesión."""
        with self._lock:
            board = self._boards.get(key)
            if board is None:
                board = self._factory(user).start()
                self._boards[key] = board
            return board

    def close(self, key: str) -> None:
        with self._lock:
            board = self._boards.pop(key, None)
        if board is not None:
            board.close()

    def close_all(self) -> None:
        with self._lock:
            boards, self._boards = list(self._boards.values()), {}
        for board in boards:
            board.close()

    def flush_all(self) -> None:
        with self._lock:
            boards = list(self._boards.values())
        for board in boards:
            board.flush()
