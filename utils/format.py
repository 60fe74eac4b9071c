# utils/format.py
from datetime import datetime

from core.models import ConfigType, CoreType

BYTE_UNITS = ["B", "KB", "MB", "GB", "TB"]

PROTOCOL_NAMES = {
    ConfigType.VMESS: "VMess",
    ConfigType.SHADOWSOCKS: "Shadowsocks",
    ConfigType.SOCKS: "SOCKS",
    ConfigType.VLESS: "VLESS",
    ConfigType.TROJAN: "Trojan",
    ConfigType.HYSTERIA2: "Hysteria2",
    ConfigType.TUIC: "TUIC",
    ConfigType.WIREGUARD: "WireGuard",
    ConfigType.HTTP: "HTTP",
}

CORE_NAMES = {
    CoreType.AUTO: "Auto",
    CoreType.XRAY: "xray",
    CoreType.SINGBOX: "sing-box",
}


def format_bytes(num_bytes: float) -> str:
    """1536 -> '1.50 KB'; точность падает с ростом числа"""
    if num_bytes <= 0:
        return "0 B"
    value = float(num_bytes)
    i = 0
    while value >= 1024 and i < len(BYTE_UNITS) - 1:
        value /= 1024
        i += 1
    decimals = 0 if value >= 100 else 1 if value >= 10 else 2
    return f"{value:.{decimals}f} {BYTE_UNITS[i]}"


def format_speed(bytes_per_sec: float) -> str:
    return f"{format_bytes(bytes_per_sec)}/s"


def format_date(timestamp) -> str:
    """Unix-время в секундах -> локальная дата; пустое значение -> '-'"""
    if not timestamp:
        return "-"
    return datetime.fromtimestamp(timestamp).strftime("%Y-%m-%d %H:%M:%S")


def protocol_name(config_type: int) -> str:
    return PROTOCOL_NAMES.get(config_type, "Unknown")


def core_name(core_type: int) -> str:
    return CORE_NAMES.get(core_type, "Unknown")
