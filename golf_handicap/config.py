import os

DATABASE_URL = os.environ["DATABASE_URL"]  # obligatorio, sin fallback

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

# Ventana de la gráfica de evolución del hándicap (meses)
HISTORY_MONTHS = int(os.getenv("HISTORY_MONTHS", "6"))
