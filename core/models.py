# core/models.py
"""
Записи, которыми обмениваются стор и backend.

Формат на проводе - плоские camelCase объекты backend'а. Внутри профиль
разложен по частям: общие поля, транспорт, TLS и настройки конкретного
протокола, выбранные по дискриминанту configType.
"""

from dataclasses import dataclass, field
from enum import IntEnum
from typing import Any, Dict, List, Optional


class ConfigType(IntEnum):
    VMESS = 1
    SHADOWSOCKS = 3
    SOCKS = 4
    VLESS = 5
    TROJAN = 6
    HYSTERIA2 = 7
    TUIC = 8
    WIREGUARD = 9
    HTTP = 10


class CoreType(IntEnum):
    AUTO = 0
    XRAY = 1
    SINGBOX = 2


class ProxyMode(IntEnum):
    MANUAL = 0
    SYSTEM = 1
    TUN = 2
    PAC = 3


# ========== Профиль: протокольные настройки ==========

@dataclass
class VMessSettings:
    uuid: str = ""
    alter_id: int = 0
    security: str = "auto"

    @classmethod
    def from_wire(cls, data: Dict[str, Any]) -> "VMessSettings":
        return cls(
            uuid=data.get('uuid', ''),
            alter_id=int(data.get('alterId') or 0),
            security=data.get('security') or 'auto',
        )

    def to_wire(self) -> Dict[str, Any]:
        return {'uuid': self.uuid, 'alterId': self.alter_id, 'security': self.security}


@dataclass
class VLESSSettings:
    uuid: str = ""
    flow: str = ""
    encryption: str = "none"

    @classmethod
    def from_wire(cls, data: Dict[str, Any]) -> "VLESSSettings":
        return cls(
            uuid=data.get('uuid', ''),
            flow=data.get('flow', ''),
            encryption=data.get('security') or 'none',
        )

    def to_wire(self) -> Dict[str, Any]:
        return {'uuid': self.uuid, 'flow': self.flow, 'security': self.encryption}


@dataclass
class TrojanSettings:
    password: str = ""
    flow: str = ""

    @classmethod
    def from_wire(cls, data: Dict[str, Any]) -> "TrojanSettings":
        # backend хранит пароль в поле uuid
        return cls(password=data.get('uuid', ''), flow=data.get('flow', ''))

    def to_wire(self) -> Dict[str, Any]:
        return {'uuid': self.password, 'flow': self.flow}


@dataclass
class ShadowsocksSettings:
    password: str = ""
    method: str = ""

    @classmethod
    def from_wire(cls, data: Dict[str, Any]) -> "ShadowsocksSettings":
        return cls(password=data.get('uuid', ''), method=data.get('security', ''))

    def to_wire(self) -> Dict[str, Any]:
        return {'uuid': self.password, 'security': self.method}


@dataclass
class AuthSettings:
    """SOCKS / HTTP: необязательная пара логин-пароль"""
    username: str = ""
    password: str = ""

    @classmethod
    def from_wire(cls, data: Dict[str, Any]) -> "AuthSettings":
        return cls(username=data.get('uuid', ''), password=data.get('security', ''))

    def to_wire(self) -> Dict[str, Any]:
        return {'uuid': self.username, 'security': self.password}


@dataclass
class Hysteria2Settings:
    password: str = ""
    ports: str = ""

    @classmethod
    def from_wire(cls, data: Dict[str, Any]) -> "Hysteria2Settings":
        return cls(password=data.get('uuid', ''), ports=data.get('ports', ''))

    def to_wire(self) -> Dict[str, Any]:
        return {'uuid': self.password, 'ports': self.ports}


@dataclass
class TUICSettings:
    uuid: str = ""
    password: str = ""

    @classmethod
    def from_wire(cls, data: Dict[str, Any]) -> "TUICSettings":
        return cls(uuid=data.get('uuid', ''), password=data.get('security', ''))

    def to_wire(self) -> Dict[str, Any]:
        return {'uuid': self.uuid, 'security': self.password}


@dataclass
class WireGuardSettings:
    private_key: str = ""
    mtu: str = ""

    @classmethod
    def from_wire(cls, data: Dict[str, Any]) -> "WireGuardSettings":
        return cls(private_key=data.get('uuid', ''), mtu=data.get('extra', ''))

    def to_wire(self) -> Dict[str, Any]:
        return {'uuid': self.private_key, 'extra': self.mtu}


PROTOCOL_SETTINGS = {
    ConfigType.VMESS: VMessSettings,
    ConfigType.VLESS: VLESSSettings,
    ConfigType.TROJAN: TrojanSettings,
    ConfigType.SHADOWSOCKS: ShadowsocksSettings,
    ConfigType.SOCKS: AuthSettings,
    ConfigType.HTTP: AuthSettings,
    ConfigType.HYSTERIA2: Hysteria2Settings,
    ConfigType.TUIC: TUICSettings,
    ConfigType.WIREGUARD: WireGuardSettings,
}


@dataclass
class Transport:
    network: str = "tcp"
    header_type: str = ""
    host: str = ""
    path: str = ""


@dataclass
class TLSOptions:
    stream_security: str = "none"
    allow_insecure: bool = False
    sni: str = ""
    alpn: str = ""
    fingerprint: str = ""
    # Reality
    public_key: str = ""
    short_id: str = ""
    spider_x: str = ""


@dataclass
class ProfileItem:
    id: str
    config_type: ConfigType
    settings: Any
    address: str = ""
    port: int = 0
    remarks: str = ""
    sub_id: str = ""
    share_uri: str = ""
    sort: int = 0
    transport: Transport = field(default_factory=Transport)
    tls: TLSOptions = field(default_factory=TLSOptions)
    core_type: CoreType = CoreType.AUTO
    extra: str = ""
    mux_enabled: Optional[bool] = None

    @property
    def network(self) -> str:
        return self.transport.network

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ProfileItem":
        """
        Собирает профиль из записи backend'а

        Raises:
            ValueError: неизвестный configType
        """
        try:
            config_type = ConfigType(int(data.get('configType') or 0))
        except ValueError:
            raise ValueError(f"Unknown configType: {data.get('configType')!r}") from None

        settings = PROTOCOL_SETTINGS[config_type].from_wire(data)
        extra = data.get('extra', '')
        if config_type == ConfigType.WIREGUARD:
            # у WireGuard поле extra занято под MTU
            extra = ''

        return cls(
            id=data.get('id', ''),
            config_type=config_type,
            settings=settings,
            address=data.get('address', ''),
            port=int(data.get('port') or 0),
            remarks=data.get('remarks', ''),
            sub_id=data.get('subId', ''),
            share_uri=data.get('shareUri', ''),
            sort=int(data.get('sort') or 0),
            transport=Transport(
                network=data.get('network') or 'tcp',
                header_type=data.get('headerType', ''),
                host=data.get('host', ''),
                path=data.get('path', ''),
            ),
            tls=TLSOptions(
                stream_security=data.get('streamSecurity') or 'none',
                allow_insecure=bool(data.get('allowInsecure', False)),
                sni=data.get('sni', ''),
                alpn=data.get('alpn', ''),
                fingerprint=data.get('fingerprint', ''),
                public_key=data.get('publicKey', ''),
                short_id=data.get('shortId', ''),
                spider_x=data.get('spiderX', ''),
            ),
            core_type=CoreType(int(data.get('coreType') or 0)),
            extra=extra,
            mux_enabled=data.get('muxEnabled'),
        )

    def to_dict(self) -> Dict[str, Any]:
        data = {
            'id': self.id,
            'configType': int(self.config_type),
            'remarks': self.remarks,
            'subId': self.sub_id,
            'shareUri': self.share_uri,
            'sort': self.sort,
            'address': self.address,
            'port': self.port,
            'uuid': '',
            'security': '',
            'network': self.transport.network,
            'headerType': self.transport.header_type,
            'host': self.transport.host,
            'path': self.transport.path,
            'streamSecurity': self.tls.stream_security,
            'allowInsecure': self.tls.allow_insecure,
            'sni': self.tls.sni,
            'alpn': self.tls.alpn,
            'fingerprint': self.tls.fingerprint,
            'publicKey': self.tls.public_key,
            'shortId': self.tls.short_id,
            'spiderX': self.tls.spider_x,
            'coreType': int(self.core_type),
            'extra': self.extra,
        }
        if self.mux_enabled is not None:
            data['muxEnabled'] = self.mux_enabled
        data.update(self.settings.to_wire())
        return data


# ========== Подписки, маршрутизация, DNS ==========

@dataclass
class SubItem:
    id: str
    remarks: str = ""
    url: str = ""
    enabled: bool = True
    sort: int = 0
    filter: str = ""
    auto_update_interval: int = 0
    update_time: int = 0
    user_agent: str = ""

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "SubItem":
        return cls(
            id=data.get('id', ''),
            remarks=data.get('remarks', ''),
            url=data.get('url', ''),
            enabled=bool(data.get('enabled', True)),
            sort=int(data.get('sort') or 0),
            filter=data.get('filter', ''),
            auto_update_interval=int(data.get('autoUpdateInterval') or 0),
            update_time=int(data.get('updateTime') or 0),
            user_agent=data.get('userAgent', ''),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            'id': self.id,
            'remarks': self.remarks,
            'url': self.url,
            'enabled': self.enabled,
            'sort': self.sort,
            'filter': self.filter,
            'autoUpdateInterval': self.auto_update_interval,
            'updateTime': self.update_time,
            'userAgent': self.user_agent,
        }


# camelCase ключи правил, которые являются списками
RULE_LIST_FIELDS = (
    'domain', 'domainSuffix', 'domainKeyword', 'domainRegex', 'geosite',
    'ip', 'ipCidr', 'geoip', 'protocol', 'processName', 'inbound', 'ruleSet',
)


@dataclass
class RuleItem:
    id: str
    outbound_tag: str = "proxy"
    enabled: bool = True
    remarks: str = ""
    port: str = ""
    network: str = ""
    matchers: Dict[str, List[str]] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "RuleItem":
        matchers = {key: list(data[key]) for key in RULE_LIST_FIELDS if data.get(key)}
        return cls(
            id=data.get('id', ''),
            outbound_tag=data.get('outboundTag', 'proxy'),
            enabled=bool(data.get('enabled', True)),
            remarks=data.get('remarks', ''),
            port=data.get('port', ''),
            network=data.get('network', ''),
            matchers=matchers,
        )

    def to_dict(self) -> Dict[str, Any]:
        data = {
            'id': self.id,
            'outboundTag': self.outbound_tag,
            'enabled': self.enabled,
            'remarks': self.remarks,
            'port': self.port,
            'network': self.network,
        }
        data.update({key: list(values) for key, values in self.matchers.items()})
        return data


@dataclass
class RoutingItem:
    id: str
    remarks: str = ""
    domain_strategy: str = "AsIs"
    rules: List[RuleItem] = field(default_factory=list)
    enabled: bool = False
    locked: bool = False
    sort: int = 0

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "RoutingItem":
        return cls(
            id=data.get('id', ''),
            remarks=data.get('remarks', ''),
            domain_strategy=data.get('domainStrategy') or 'AsIs',
            rules=[RuleItem.from_dict(rule) for rule in data.get('rules') or []],
            enabled=bool(data.get('enabled', False)),
            locked=bool(data.get('locked', False)),
            sort=int(data.get('sort') or 0),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            'id': self.id,
            'remarks': self.remarks,
            'domainStrategy': self.domain_strategy,
            'rules': [rule.to_dict() for rule in self.rules],
            'enabled': self.enabled,
            'locked': self.locked,
            'sort': self.sort,
        }


@dataclass
class DNSItem:
    remote_dns: str = "https://dns.google/dns-query"
    direct_dns: str = "https://dns.alidns.com/dns-query"
    bootstrap_dns: str = "1.1.1.1"
    use_system_hosts: bool = False
    fake_ip: bool = False
    hosts: str = ""
    domain_strategy: str = "prefer_ipv4"

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> "DNSItem":
        defaults = cls()
        data = data or {}
        return cls(
            remote_dns=data.get('remoteDns') or defaults.remote_dns,
            direct_dns=data.get('directDns') or defaults.direct_dns,
            bootstrap_dns=data.get('bootstrapDns') or defaults.bootstrap_dns,
            use_system_hosts=bool(data.get('useSystemHosts', False)),
            fake_ip=bool(data.get('fakeIP', False)),
            hosts=data.get('hosts', ''),
            domain_strategy=data.get('domainStrategy') or defaults.domain_strategy,
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            'remoteDns': self.remote_dns,
            'directDns': self.direct_dns,
            'bootstrapDns': self.bootstrap_dns,
            'useSystemHosts': self.use_system_hosts,
            'fakeIP': self.fake_ip,
            'hosts': self.hosts,
            'domainStrategy': self.domain_strategy,
        }


# ========== Глобальная конфигурация и живое состояние ядра ==========

CONFIG_SECTIONS = ('coreBasic', 'inbounds', 'tun', 'systemProxy', 'ui', 'speedTest')


@dataclass
class AppConfig:
    """Конфигурация backend'а; вложенные секции хранятся как есть"""
    active_profile_id: str = ""
    active_routing_id: str = ""
    active_dns_preset: str = "default"
    proxy_mode: ProxyMode = ProxyMode.MANUAL
    sections: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> "AppConfig":
        data = data or {}
        return cls(
            active_profile_id=data.get('activeProfileId', ''),
            active_routing_id=data.get('activeRoutingId', ''),
            active_dns_preset=data.get('activeDnsPreset') or 'default',
            proxy_mode=ProxyMode(int(data.get('proxyMode') or 0)),
            sections={key: data[key] for key in CONFIG_SECTIONS if key in data},
        )

    def to_dict(self) -> Dict[str, Any]:
        data = {
            'activeProfileId': self.active_profile_id,
            'activeRoutingId': self.active_routing_id,
            'activeDnsPreset': self.active_dns_preset,
            'proxyMode': int(self.proxy_mode),
        }
        data.update(self.sections)
        return data


@dataclass
class CoreStatus:
    running: bool = False
    core_type: CoreType = CoreType.AUTO
    version: str = ""
    start_time: Optional[int] = None
    pid: int = 0
    profile: str = ""

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "CoreStatus":
        return cls(
            running=bool(data.get('running', False)),
            core_type=CoreType(int(data.get('coreType') or 0)),
            version=data.get('version', ''),
            start_time=data.get('startTime'),
            pid=int(data.get('pid') or 0),
            profile=data.get('profile', ''),
        )


@dataclass
class TrafficStats:
    upload: int = 0
    download: int = 0
    total_upload: int = 0
    total_download: int = 0

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "TrafficStats":
        # ядро присылает up/down, старые сборки - upload/download
        return cls(
            upload=int(data.get('upload', data.get('up', 0)) or 0),
            download=int(data.get('download', data.get('down', 0)) or 0),
            total_upload=int(data.get('totalUpload') or 0),
            total_download=int(data.get('totalDownload') or 0),
        )


@dataclass
class SpeedTestResult:
    profile_id: str
    latency: int = -1  # мс, -1 = таймаут
    speed: int = 0  # байт/с, 0 = не измерялось

    @property
    def id(self) -> str:
        return self.profile_id

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "SpeedTestResult":
        return cls(
            profile_id=data.get('profileId', ''),
            latency=-1 if data.get('latency') is None else int(data['latency']),
            speed=int(data.get('speed') or 0),
        )


@dataclass
class UpdateProgress:
    core_type: CoreType = CoreType.AUTO
    downloaded: int = 0
    total: int = 0
    status: str = ""  # downloading, extracting, done, error
    description: str = ""

    @property
    def percent(self) -> int:
        if self.total <= 0:
            return 0
        return min(100, int(self.downloaded * 100 / self.total))

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "UpdateProgress":
        return cls(
            core_type=CoreType(int(data.get('coreType') or 0)),
            downloaded=int(data.get('downloaded') or 0),
            total=int(data.get('total') or 0),
            status=data.get('status', ''),
            description=data.get('description', ''),
        )


@dataclass
class Notification:
    type: str = "info"
    title: str = ""
    message: str = ""

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Notification":
        return cls(
            type=data.get('type', 'info'),
            title=data.get('title', ''),
            message=data.get('message', ''),
        )
