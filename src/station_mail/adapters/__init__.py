"""Infrastructure behind the application ports.

``adif`` renders records, ``email`` composes and delivers over smtplib,
``config`` and ``logging`` wrap lib_layered_config and lib_log_rich,
``memory`` holds test doubles and ``cli`` is the ``send-adif`` driver.
"""

from __future__ import annotations

__all__: list[str] = []
