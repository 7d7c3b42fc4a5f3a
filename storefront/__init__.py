# ==============================================================================
# STOREFRONT - Tienda en línea (productos, carrito, pedidos, notificaciones)
# ==============================================================================
#   repo_root/
#   ├── wsgi.py          <- Punto de entrada WSGI
#   ├── pyproject.toml
#   └── storefront/      <- Paquete Python
#       ├── main.py          → Rutas Flask (create_app)
#       ├── app_container.py → Contenedor de dependencias
#       ├── query_cache.py   → Caché de consultas + grafo de invalidación
#       ├── models/          → Entidades (dataclasses)
#       ├── repositories/    → Acceso a datos
#       └── services/        → Lógica de negocio
# ==============================================================================

__version__ = '1.0.0'
