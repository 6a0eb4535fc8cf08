import json
from functools import lru_cache

from pydantic import ValidationError

from bufstream.bootstrap.config.loader import get_configfile
from bufstream.bootstrap.config.settings import BufstreamConfig
from bufstream.core.models.config import StreamConfig


@lru_cache
def get_config(configfile: str | None = None) -> BufstreamConfig:
    try:
        return BufstreamConfig.load(get_configfile(configfile))
    except ValidationError as ex:
        msg = ["Configuration validation failed:"]
        errs = json.loads(ex.json())
        for err in errs:
            msg.append(f"  {'.'.join(str(loc) for loc in err['loc'])}: {err['msg']}")
        raise SystemExit("\n".join(msg))


def get_stream_config(configfile: str | None = None) -> StreamConfig:
    return get_config(configfile).to_stream_config()
