# ==============================================================================
# CONTENEDOR DE DEPENDENCIAS - Inyección de servicios
# ==============================================================================
# Este módulo proporciona una forma centralizada de obtener instancias
# de repositorios y servicios. Facilita:
#   - Inyección de dependencias
#   - Testing (se apunta el contenedor a un directorio temporal)
#   - Cambiar el almacén de documentos sin tocar servicios
#
# Para usar otro almacén basta con implementar las interfaces de
# repositories/interfaces.py y cambiar la instanciación en este archivo.
# ==============================================================================

from typing import Optional

from app_pedidos import config

# ═══════════════════════════════════════════════════════════════════════════════
# REPOSITORIOS - Colecciones de documentos (JSON)
# ═══════════════════════════════════════════════════════════════════════════════
from app_pedidos.repositories import (
    AuditRepository,
    CategoryRepository,
    OrderRepository,
    ProductRepository,
    SettingsRepository,
)

# ═══════════════════════════════════════════════════════════════════════════════
# SERVICIOS - Lógica de negocio
# ═══════════════════════════════════════════════════════════════════════════════
from app_pedidos.services import (
    AuditService,
    BoardRegistry,
    CartService,
    CatalogService,
    ImageService,
    NotificationService,
    OrderBoard,
    OrderService,
    ShopService,
    StatsService,
)


class AppContainer:
    """
    Contenedor de dependencias de la aplicación.

    Singleton con carga diferida de cada repositorio y servicio.

    Uso:
        container = AppContainer(base_path='/srv/pedidos/data')
        order_service = container.order_service
        settings = container.shop_service.get_settings()
    """

    _instance: Optional['AppContainer'] = None

    def __new__(cls, base_path: str = None, persist_status_writes: bool = None):
        """Singleton pattern."""
        if cls._instance is None:
            cls._instance = super().__new__(cls)
            cls._instance._initialized = False
        return cls._instance

    def __init__(self, base_path: str = None, persist_status_writes: bool = None):
        """
        Inicializa el contenedor.

        Args:
            base_path: Directorio de las colecciones JSON
            persist_status_writes: Escribir los cambios de estado del tablero
                                   (por defecto config.PERSIST_STATUS_WRITES)
        """
        if self._initialized:
            return

        self._base_path = base_path or config.DATA_DIR
        self._persist_status_writes = (config.PERSIST_STATUS_WRITES
                                       if persist_status_writes is None
                                       else persist_status_writes)

        # Repositorios (lazy loading)
        self._product_repo: Optional[ProductRepository] = None
        self._category_repo: Optional[CategoryRepository] = None
        self._order_repo: Optional[OrderRepository] = None
        self._settings_repo: Optional[SettingsRepository] = None
        self._audit_repo: Optional[AuditRepository] = None

        # Servicios (lazy loading)
        self._audit_service: Optional[AuditService] = None
        self._cart_service: Optional[CartService] = None
        self._catalog_service: Optional[CatalogService] = None
        self._order_service: Optional[OrderService] = None
        self._shop_service: Optional[ShopService] = None
        self._stats_service: Optional[StatsService] = None
        self._notification_service: Optional[NotificationService] = None
        self._image_service: Optional[ImageService] = None
        self._boards: Optional[BoardRegistry] = None

        self._initialized = True

    @property
    def base_path(self) -> str:
        return self._base_path

    # =========================================================================
    # REPOSITORIOS
    # =========================================================================

    @property
    def product_repo(self) -> ProductRepository:
        if self._product_repo is None:
            self._product_repo = ProductRepository(self._base_path)
        return self._product_repo

    @property
    def category_repo(self) -> CategoryRepository:
        if self._category_repo is None:
            self._category_repo = CategoryRepository(self._base_path)
        return self._category_repo

    @property
    def order_repo(self) -> OrderRepository:
        if self._order_repo is None:
            self._order_repo = OrderRepository(self._base_path)
        return self._order_repo

    @property
    def settings_repo(self) -> SettingsRepository:
        if self._settings_repo is None:
            self._settings_repo = SettingsRepository(self._base_path)
        return self._settings_repo

    @property
    def audit_repo(self) -> AuditRepository:
        if self._audit_repo is None:
            self._audit_repo = AuditRepository(self._base_path)
        return self._audit_repo

    # =========================================================================
    # SERVICIOS
    # =========================================================================

    @property
    def audit_service(self) -> AuditService:
        if self._audit_service is None:
            self._audit_service = AuditService(self.audit_repo)
        return self._audit_service

    @property
    def cart_service(self) -> CartService:
        if self._cart_service is None:
            self._cart_service = CartService(self.product_repo, self.category_repo)
        return self._cart_service

    @property
    def catalog_service(self) -> CatalogService:
        if self._catalog_service is None:
            self._catalog_service = CatalogService(
                self.product_repo,
                self.category_repo,
                self.audit_service
            )
        return self._catalog_service

    @property
    def order_service(self) -> OrderService:
        if self._order_service is None:
            self._order_service = OrderService(self.order_repo, self.audit_service)
        return self._order_service

    @property
    def shop_service(self) -> ShopService:
        if self._shop_service is None:
            self._shop_service = ShopService(self.settings_repo, self.audit_service)
        return self._shop_service

    @property
    def stats_service(self) -> StatsService:
        if self._stats_service is None:
            self._stats_service = StatsService(self.order_service.list_orders)
        return self._stats_service

    @property
    def notification_service(self) -> NotificationService:
        if self._notification_service is None:
            self._notification_service = NotificationService()
        return self._notification_service

    @property
    def image_service(self) -> ImageService:
        if self._image_service is None:
            self._image_service = ImageService()
        return self._image_service

    @property
    def boards(self) -> BoardRegistry:
        """Tableros kanban, uno por sesión de administrador."""
        if self._boards is None:
            self._boards = BoardRegistry(self._new_board)
        return self._boards

    def _new_board(self, user: str) -> OrderBoard:
        return OrderBoard(
            self.order_repo,
            self.audit_service,
            persist=self._persist_status_writes,
            user=user
        )

    # =========================================================================
    # UTILIDADES
    # =========================================================================

    def reset(self) -> None:
        """
        Reinicia todas las instancias.
        Cierra los tableros abiertos (suscripciones e hilos de escritura).
        """
        if self._boards is not None:
            self._boards.close_all()

        self._product_repo = None
        self._category_repo = None
        self._order_repo = None
        self._settings_repo = None
        self._audit_repo = None

        self._audit_service = None
        self._cart_service = None
        self._catalog_service = None
        self._order_service = None
        self._shop_service = None
        self._stats_service = None
        self._notification_service = None
        self._image_service = None
        self._boards = None

    @classmethod
    def get_instance(cls, base_path: str = None, persist_status_writes: bool = None) -> 'AppContainer':
        """
        Obtiene la instancia singleton del contenedor.

        Args:
            base_path: Directorio de datos (solo se usa en la primera llamada)
            persist_status_writes: Ver __init__ (solo en la primera llamada)
        """
        if cls._instance is None:
            return cls(base_path, persist_status_writes)
        return cls._instance

    @classmethod
    def reset_instance(cls) -> None:
        """Elimina la instancia singleton (útil para tests)."""
        if cls._instance is not None:
            cls._instance.reset()
            cls._instance = None


def get_container(base_path: str = None, persist_status_writes: bool = None) -> AppContainer:
    """
    Obtiene el contenedor de dependencias global.

    Args:
        base_path: Directorio de datos
        persist_status_writes: Escribir los cambios de estado del tablero

    Returns:
        Instancia del contenedor
    """
    return AppContainer.get_instance(base_path, persist_status_writes)
