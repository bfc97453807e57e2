"""Service names for well-known ports and IP protocol numbers."""

from __future__ import annotations

UNKNOWN_SERVICE = "UNKNOWN"

# Based on IANA assignments, extended with common cloud/container services
WELL_KNOWN_PORTS: dict[int, str] = {
    # Common services
    20: "FTP-DATA",
    21: "FTP",
    22: "SSH",
    23: "TELNET",
    25: "SMTP",
    53: "DNS",
    67: "DHCP-SERVER",
    68: "DHCP-CLIENT",
    69: "TFTP",
    80: "HTTP",
    110: "POP3",
    111: "PORTMAPPER",
    123: "NTP",
    135: "MS-RPC",
    137: "NETBIOS-NS",
    138: "NETBIOS-DGM",
    139: "NETBIOS-SSN",
    143: "IMAP",
    161: "SNMP",
    162: "SNMP-TRAP",
    179: "BGP",
    389: "LDAP",
    443: "HTTPS",
    445: "SMB",
    465: "SMTPS",
    500: "ISAKMP",
    514: "SYSLOG",
    515: "LPD",
    587: "SMTP-SUBMISSION",
    636: "LDAPS",
    873: "RSYNC",
    993: "IMAPS",
    995: "POP3S",
    # Registered ports
    1080: "SOCKS",
    1194: "OPENVPN",
    1433: "MS-SQL",
    1521: "ORACLE",
    1701: "L2TP",
    1723: "PPTP",
    1830: "ORACLE-ONS",
    2003: "GRAPHITE",
    2004: "GRAPHITE-PICKLE",
    2049: "NFS",
    2375: "DOCKER-REST",
    2376: "DOCKER-REST-TLS",
    2377: "DOCKER-SWARM",
    2379: "ETCD-CLIENT",
    2380: "ETCD-PEER",
    3000: "GRAFANA",
    3128: "SQUID-PROXY",
    3306: "MYSQL",
    3389: "RDP",
    4200: "ANGULAR-DEV",
    4317: "OTLP-GRPC",
    4318: "OTLP-HTTP",
    4369: "EPMD",
    4500: "IPSEC-NAT-T",
    4789: "VXLAN",
    5000: "FLASK-DEV",
    5001: "SYNOLOGY-DSM",
    5044: "LOGSTASH",
    5353: "MDNS",
    5432: "POSTGRESQL",
    5671: "AMQP-TLS",
    5672: "AMQP",
    5900: "VNC",
    5984: "COUCHDB",
    5985: "WINRM-HTTP",
    5986: "WINRM-HTTPS",
    6379: "REDIS",
    6443: "KUBERNETES-API",
    6650: "PULSAR",
    6651: "PULSAR-TLS",
    7000: "CASSANDRA",
    7001: "CASSANDRA-SSL",
    7199: "CASSANDRA-JMX",
    7946: "DOCKER-SWARM-COMM",
    8000: "HTTP-ALT",
    8001: "KUBERNETES-API-PROXY",
    8008: "HTTP-ALT",
    8080: "HTTP-PROXY",
    8081: "HTTP-ALT",
    8086: "INFLUXDB",
    8088: "HTTP-ALT",
    8200: "VAULT",
    8443: "HTTPS-ALT",
    8888: "HTTP-ALT",
    9000: "SONARQUBE",
    9042: "CASSANDRA-CQL",
    9090: "PROMETHEUS",
    9091: "PROMETHEUS-PUSHGATEWAY",
    9092: "KAFKA",
    9093: "ALERTMANAGER",
    9094: "ALERTMANAGER-CLUSTER",
    9100: "NODE-EXPORTER",
    9160: "CASSANDRA-THRIFT",
    9187: "POSTGRES-EXPORTER",
    9200: "ELASTICSEARCH",
    9300: "ELASTICSEARCH-TRANSPORT",
    9418: "GIT",
    10250: "KUBELET",
    10251: "KUBE-SCHEDULER",
    10252: "KUBE-CONTROLLER",
    10255: "KUBELET-READONLY",
    11211: "MEMCACHED",
    15672: "RABBITMQ-MGMT",
    24224: "FLUENTD",
    25565: "MINECRAFT",
    25672: "RABBITMQ-DIST",
    27015: "SOURCE-ENGINE",
    27017: "MONGODB",
    27018: "MONGODB-SHARD",
    27019: "MONGODB-CONFIG",
    28017: "MONGODB-WEB",
    50000: "SAP",
    61613: "STOMP",
    61614: "STOMP-SSL",
    61616: "ACTIVEMQ",
}

PROTOCOL_NAMES: dict[int, str] = {
    1: "ICMP",
    6: "TCP",
    17: "UDP",
    41: "IPv6",
    47: "GRE",
    50: "ESP",
    51: "AH",
    58: "ICMPv6",
    89: "OSPF",
    132: "SCTP",
}


def port_name(port: int) -> str:
    """Get the service name for a port, or ``"UNKNOWN"``."""
    return WELL_KNOWN_PORTS.get(port, UNKNOWN_SERVICE)


def port_display(port: int) -> str:
    """Format a port for display, e.g. ``"443 - HTTPS"``."""
    name = port_name(port)
    if name == UNKNOWN_SERVICE:
        return str(port)
    return f"{port} - {name}"


def protocol_name(protocol: int) -> str:
    """Get the protocol name for an IANA number, or ``"PROTOCOL-<n>"``."""
    return PROTOCOL_NAMES.get(protocol, f"PROTOCOL-{protocol}")


def is_well_known_port(port: int) -> bool:
    return port in WELL_KNOWN_PORTS


def port_category(port: int) -> str:
    """Classify a port into its IANA range.

    Args:
        port: The port number to classify.

    Returns:
        "Well-Known", "Registered", "Dynamic/Private" or "Unknown".
    """
    if 1 <= port <= 1023:
        return "Well-Known"
    elif 1024 <= port <= 49151:
        return "Registered"
    elif 49152 <= port <= 65535:
        return "Dynamic/Private"
    return "Unknown"


def search_by_service_name(query: str) -> list[tuple[int, str]]:
    """Find ports whose service name contains ``query`` (case-insensitive).

    Returns:
        (port, service) pairs sorted by port.
    """
    needle = query.lower()
    return sorted(
        (port, service)
        for port, service in WELL_KNOWN_PORTS.items()
        if needle in service.lower()
    )
