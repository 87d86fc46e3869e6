from __future__ import annotations
import logging
from typing import Optional, Sequence

from .collectors import make_discovery, start_collector
from .config import init_cfg_from_args, parse_args
from .rules import load_rules
from .state import ServiceState
from .web import create_app

def main(argv: Optional[Sequence[str]] = None):
    args = parse_args(argv)
    cfg = init_cfg_from_args(args)
    logging.basicConfig(level=cfg.log_level, format="%(asctime)s %(levelname)s %(name)s: %(message)s")

    state = ServiceState(cfg=cfg, discovery=make_discovery(cfg))
    state.rules = load_rules(cfg.rules_path)
    logging.getLogger(__name__).info("discovery backend: %s", type(state.discovery).__name__)

    start_collector(state)

    app = create_app(state)
    print(f"[*] Serving on http://{cfg.host}:{cfg.port}")
    app.run(host=cfg.host, port=cfg.port, debug=False, use_reloader=False, threaded=True)

if __name__ == '__main__':
    main()
