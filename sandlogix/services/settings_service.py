import copy
import logging
from sandlogix.extensions import db
from sandlogix.models.app_settings import AppSettings
from sandlogix.services.errors import ServiceError

logger = logging.getLogger(__name__)

DEFAULT_APP_SETTINGS = {
    "default_commission_rate": 35,
    "default_other_fees": 0,
    "currency_symbol": "GNF",
    "granite_prices": {},
    "sand_types": ["30m³ de 0/40", "30m³ de 8/16", "30m³ de 4/8", "Autre"],
    "payment_methods": ["Espèces", "Orange Money", "Virement", "Chèque"],
}


def get_settings() -> AppSettings:
    """Return the settings row, creating it with defaults on first access."""
    try:
        settings = AppSettings.query.order_by(AppSettings.id).first()
        if settings is None:
            settings = AppSettings(**copy.deepcopy(DEFAULT_APP_SETTINGS))
            db.session.add(settings)
            db.session.commit()
            logger.info("Created default application settings")
        return settings
    except Exception as e:
        db.session.rollback()
        logging.error(f"Error loading application settings: {e}", exc_info=True)
        raise ServiceError("Could not load settings. Please try again later.")


def save_settings(data: dict) -> AppSettings:
    """Apply already-validated settings fields; omitted fields are left unchanged."""
    settings = get_settings()
    try:
        for key, value in data.items():
            if key in ('sand_types', 'payment_methods'):
                value = [label.strip() for label in value]
            elif key == 'granite_prices':
                value = {sand_type.strip(): price for sand_type, price in value.items()}
            setattr(settings, key, value)
        db.session.commit()
        logger.info(f"Application settings updated: {sorted(data.keys())}")
        return settings
    except Exception as e:
        db.session.rollback()
        logging.error(f"Error saving application settings: {e}", exc_info=True)
        raise ServiceError("Could not save settings. Please try again later.")
