# =============================================================================
# logger.py - Gestione logging per mapping e rendering dei parziali
# =============================================================================
import logging
from datetime import datetime
import os

# =============================================================================
# CONFIGURAZIONE
# =============================================================================
RENDER_LOG_CONFIG = {
    'enabled': True,                    # Master switch: False disabilita tutto
    'console_enabled': True,            # Stampa warning su terminale
    'file_enabled': False,              # Scrive su file (off: il core non fa I/O)
    'log_dir': './logs',                # Directory per i file di log
    'log_name': None,                   # None = auto-genera con timestamp
    'level': logging.INFO,              # Livello del file handler
}

LOGGER_NAME = 'paxel_render'

_render_logger = None
_render_logger_initialized = False


# =============================================================================
# FUNZIONI PUBBLICHE
# =============================================================================

def configure_render_logger(
    enabled=True,
    console_enabled=True,
    file_enabled=False,
    log_dir='./logs',
    log_name=None,
    level=logging.INFO
):
    """
    Configura il logger del rendering (clip, layout della griglia, render).
    Chiamare PRIMA di creare qualsiasi PartialGenerator.

    Args:
        enabled: Master switch - se False, nessun logging
        console_enabled: Se True, stampa i warning su terminale
        file_enabled: Se True, scrive su file
        log_dir: Directory dove salvare i file di log
        log_name: Nome base del file (senza estensione).
                  Il file sarà: paxel_render_{log_name}.log
        level: Livello minimo scritto su file (e.g. logging.DEBUG)
    """
    global _render_logger, _render_logger_initialized

    RENDER_LOG_CONFIG['enabled'] = enabled
    RENDER_LOG_CONFIG['console_enabled'] = console_enabled
    RENDER_LOG_CONFIG['file_enabled'] = file_enabled
    RENDER_LOG_CONFIG['log_dir'] = log_dir
    RENDER_LOG_CONFIG['log_name'] = log_name
    RENDER_LOG_CONFIG['level'] = level

    # Chiude gli handler del logger precedente prima della re-inizializzazione
    if _render_logger is not None:
        for handler in list(_render_logger.handlers):
            handler.close()
            _render_logger.removeHandler(handler)

    _render_logger = None
    _render_logger_initialized = False


def get_render_logger():
    """
    Ottiene il logger del rendering (lazy initialization).
    Rispetta la configurazione in RENDER_LOG_CONFIG.

    Returns:
        logging.Logger o None se disabilitato
    """
    global _render_logger, _render_logger_initialized

    # Se già inizializzato, ritorna (anche se None)
    if _render_logger_initialized:
        return _render_logger

    _render_logger_initialized = True

    # Master switch
    if not RENDER_LOG_CONFIG['enabled']:
        _render_logger = None
        return None

    # Se né console né file sono abilitati, disabilita
    if not RENDER_LOG_CONFIG['console_enabled'] and not RENDER_LOG_CONFIG['file_enabled']:
        _render_logger = None
        return None

    level = RENDER_LOG_CONFIG['level']

    _render_logger = logging.getLogger(LOGGER_NAME)
    _render_logger.setLevel(min(level, logging.WARNING))
    _render_logger.handlers = []  # Pulisci handler esistenti

    # === FILE HANDLER ===
    if RENDER_LOG_CONFIG['file_enabled']:
        log_dir = RENDER_LOG_CONFIG['log_dir']

        if not os.path.exists(log_dir):
            os.makedirs(log_dir)

        if RENDER_LOG_CONFIG.get('log_name'):
            log_filename = f"paxel_render_{RENDER_LOG_CONFIG['log_name']}.log"
        else:
            timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
            log_filename = f'paxel_render_{timestamp}.log'

        log_path = os.path.join(log_dir, log_filename)

        file_handler = logging.FileHandler(log_path, mode='w', encoding='utf-8')
        file_handler.setLevel(level)
        file_handler.setFormatter(logging.Formatter(
            '%(asctime)s | %(levelname)-7s | %(message)s',
            datefmt='%H:%M:%S'
        ))
        _render_logger.addHandler(file_handler)

    # === CONSOLE HANDLER ===
    if RENDER_LOG_CONFIG['console_enabled']:
        console_handler = logging.StreamHandler()
        console_handler.setLevel(logging.WARNING)
        console_handler.setFormatter(logging.Formatter('PAXEL: %(message)s'))
        _render_logger.addHandler(console_handler)

    return _render_logger


def get_render_log_path():
    """
    Ritorna il percorso del file di log corrente (se esiste).

    Returns:
        str o None
    """
    if _render_logger is None:
        return None

    for handler in _render_logger.handlers:
        if isinstance(handler, logging.FileHandler):
            return handler.baseFilename
    return None


def log_clip_warning(param_name, position, raw_value, clipped_value,
                     min_val, max_val):
    """
    Logga un warning per un valore d'envelope clippato durante il mapping.

    Args:
        param_name: 'frequency' o 'amplitude'
        position: posizione (in campioni) del bordo di griglia valutato
        raw_value: valore letto dall'envelope
        clipped_value: valore dopo il clip
        min_val: limite minimo
        max_val: limite massimo
    """
    logger = get_render_logger()

    if logger is None:
        return

    if raw_value < min_val:
        bound_type = "MIN"
        bound_value = min_val
    else:
        bound_type = "MAX"
        bound_value = max_val
    deviation = raw_value - bound_value

    logger.warning(
        f"{param_name:<10} | "
        f"sample={position:>9d} | "
        f"raw={raw_value:>14.6f} → clip={clipped_value:>14.6f} | "
        f"{bound_type}={bound_value:>12.4f} | "
        f"Δ={deviation:>+12.6f}"
    )


def log_grid_layout(paxel_duration_samples, offset_samples, duration_samples, layout):
    """
    Logga (DEBUG) il risultato del layout di griglia.

    Args:
        layout: lista di (start_sample, duration_samples)
    """
    logger = get_render_logger()

    if logger is None:
        return

    lead_in = layout[0][1] if offset_samples and layout else 0
    logger.debug(
        f"[GRID] paxel={paxel_duration_samples} offset={offset_samples} | "
        f"envelope={duration_samples} samples → {len(layout)} paxel | "
        f"lead-in={lead_in} last={layout[-1][1] if layout else 0}"
    )


def log_partial_rendered(labels, paxel_count, total_samples, workers=None):
    """Logga (DEBUG) il completamento del render di un parziale."""
    logger = get_render_logger()

    if logger is None:
        return

    tag = ','.join(sorted(labels)) if labels else '-'
    logger.debug(
        f"[RENDER] [{tag}] {paxel_count} paxel → {total_samples} samples "
        f"(workers={workers or 1})"
    )
