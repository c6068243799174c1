"""
metadata.py - Companion .info file written next to each dictionary.

One field per line, so tools can introspect a dictionary without
loading it:

    #Timestamp 1760000000000
    #FSA format <marisa>
    fsa.dict.encoding=UTF-8
    fsa.dict.encoder=SUFFIX
    fsa.dict.separator=+
"""

import logging
import time
from pathlib import Path
from typing import Dict, List, Optional

from morphdict.config import CompileConfig


logger = logging.getLogger(__name__)

ENCODING_KEY = 'fsa.dict.encoding'
ENCODER_KEY = 'fsa.dict.encoder'
SEPARATOR_KEY = 'fsa.dict.separator'


def info_lines(config: CompileConfig, timestamp_ms: Optional[int] = None) -> List[str]:
    if timestamp_ms is None:
        timestamp_ms = int(time.time() * 1000)
    return [
        f"#Timestamp {timestamp_ms}",
        f"#FSA format <{config.format}>",
        f"{ENCODING_KEY}={config.encoding}",
        f"{ENCODER_KEY}={config.encoder.upper()}",
        f"{SEPARATOR_KEY}={config.separator_text}",
    ]


def write_info(path: Path, config: CompileConfig, timestamp_ms: Optional[int] = None) -> None:
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, 'w', encoding='utf-8', newline='\n') as f:
        for line in info_lines(config, timestamp_ms):
            f.write(line + '\n')
    logger.info(f"  Info written: {path}")


def read_info(path: Path) -> Dict[str, str]:
    """
    Parse an .info file.

    Returns a dict with the key=value properties plus 'timestamp' and
    'format' taken from the comment lines.
    """
    info: Dict[str, str] = {}
    with open(path, 'r', encoding='utf-8') as f:
        for line in f:
            line = line.rstrip('\n')
            if not line:
                continue
            if line.startswith('#Timestamp '):
                info['timestamp'] = line[len('#Timestamp '):].strip()
            elif line.startswith('#FSA format <') and line.endswith('>'):
                info['format'] = line[len('#FSA format <'):-1]
            elif line.startswith('#'):
                continue
            elif '=' in line:
                key, value = line.split('=', 1)
                info[key.strip()] = value
    return info
