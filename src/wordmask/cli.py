from __future__ import annotations

import argparse
import logging
import socket
import sys
from typing import List

from .constants import CLIENT_TIMEOUT_MS, PORT_MAX, PORT_MIN, SEND_TIMEOUT_MS, SERVER_COLLECT_TIMEOUT_MS
from .errors import InputError, ProtocolError, SendFailed
from .net import Impairment, UdpEndpoint
from .receiver import Metrics, Receiver
from .sender import StopAndWaitSender
from .tcp import TcpClient, TcpServer
from .udp_client import MaskClient
from .udp_server import MaskServer

PROMPTS = (
    "Enter server name or IP address: ",
    "Enter port: ",
    "Enter string: ",
    "Enter keyword: ",
)

INVALID_INPUT = "Invalid input format. Terminating!"
INVALID_PORT = "Invalid port number. Terminating!"


def parse_port(text: str | None) -> int:
    try:
        port = int(text or "")
    except ValueError:
        raise InputError(INVALID_PORT) from None
    if not PORT_MIN <= port <= PORT_MAX:
        raise InputError(INVALID_PORT)
    return port


def require_fields(*fields: str) -> None:
    if any(not field.strip() for field in fields):
        raise InputError(INVALID_INPUT)


def prompt_fields() -> List[str]:
    values = []
    for prompt in PROMPTS:
        try:
            values.append(input(prompt))
        except EOFError:
            values.append("")
    return values


def read_client_input() -> tuple[str, int, bytes, bytes]:
    host, port_text, phrase, keyword = prompt_fields()
    require_fields(host, port_text, phrase, keyword)
    port = parse_port(port_text)
    return host, port, phrase.encode("utf-8"), keyword.encode("utf-8")


def _print_line(line: bytes) -> None:
    print(line.decode("utf-8", errors="replace"), flush=True)


def cmd_tcp_server(args: argparse.Namespace) -> int:
    try:
        port = parse_port(args.port)
    except InputError as exc:
        print(exc, file=sys.stderr)
        return 1

    try:
        server = TcpServer.listening(args.host, port)
    except OSError as exc:
        logging.error("Server could not provide a port: %s", exc)
        return 1

    logging.info("Server listening on port: %d", port)
    try:
        server.serve_forever()
    finally:
        server.close()
    return 0


def cmd_tcp_client(args: argparse.Namespace) -> int:
    try:
        host, port, phrase, keyword = read_client_input()
    except InputError as exc:
        print(exc, file=sys.stderr)
        return 1

    try:
        client = TcpClient.connect(host, port, timeout_ms=args.timeout_ms)
    except OSError:
        print("Could not connect to server. Terminating!", file=sys.stderr)
        return 1

    try:
        for line in client.exchange(phrase, keyword):
            _print_line(line)
    except OSError as exc:
        print(f"Could not fetch result. Terminating! ({exc})", file=sys.stderr)
        return 1
    finally:
        client.close()

    print("Closing client...")
    return 0


def cmd_udp_server(args: argparse.Namespace) -> int:
    try:
        port = parse_port(args.port)
    except InputError as exc:
        print(exc, file=sys.stderr)
        return 1

    impair = Impairment(args.loss_rate, args.delay_ms)
    try:
        udp = UdpEndpoint.listening(args.host, port, impairment=impair)
    except OSError as exc:
        logging.error("Server could not provide a port: %s", exc)
        return 1

    metrics = Metrics()
    server = MaskServer(
        StopAndWaitSender(udp, timeout_ms=SEND_TIMEOUT_MS, metrics=metrics),
        Receiver(udp, collect_timeout_ms=SERVER_COLLECT_TIMEOUT_MS, metrics=metrics),
    )
    logging.info("Server listening on port: %d", port)
    try:
        server.serve_forever()
    finally:
        udp.close()
    return 0


def cmd_udp_client(args: argparse.Namespace) -> int:
    try:
        host, port, phrase, keyword = read_client_input()
    except InputError as exc:
        print(exc, file=sys.stderr)
        return 1

    try:
        address = socket.gethostbyname(host)
    except OSError as exc:
        print(f"Host not found: {exc}", file=sys.stderr)
        return 1

    impair = Impairment(args.loss_rate, args.delay_ms)
    udp = UdpEndpoint.sending(timeout_ms=args.timeout_ms, impairment=impair)
    metrics = Metrics()
    client = MaskClient(
        StopAndWaitSender(udp, timeout_ms=SEND_TIMEOUT_MS, metrics=metrics),
        Receiver(udp, collect_timeout_ms=args.timeout_ms, metrics=metrics),
        (address, port),
    )

    try:
        for line in client.exchange(phrase, keyword):
            _print_line(line)
    except SendFailed:
        print("Failed to send string. Terminating!", file=sys.stderr)
        return 1
    except (ProtocolError, OSError) as exc:
        print(f"Could not fetch result. Terminating! ({exc})", file=sys.stderr)
        return 1
    finally:
        udp.close()
        logging.debug("client metrics: %s", metrics)

    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="wordmask", description="Keyword masking over TCP and UDP.")
    parser.add_argument("--log-level", default="INFO", choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"])
    sub = parser.add_subparsers(dest="cmd", required=True)

    def add_impairment(x: argparse.ArgumentParser) -> None:
        x.add_argument("--loss-rate", default=0.0, type=float, help="simulate datagram loss")
        x.add_argument("--delay-ms", default=0, type=int, help="simulate per-datagram delay")

    # port is checked by parse_port, not argparse, so bad values exit 1
    tcp_server = sub.add_parser("tcp-server", help="serve masking requests over TCP")
    tcp_server.add_argument("port", nargs="?")
    tcp_server.add_argument("--host", default="0.0.0.0")
    tcp_server.set_defaults(func=cmd_tcp_server)

    tcp_client = sub.add_parser("tcp-client", help="prompt for a phrase and mask it over TCP")
    tcp_client.add_argument("--timeout-ms", default=0, type=int, help="0 waits forever")
    tcp_client.set_defaults(func=cmd_tcp_client)

    udp_server = sub.add_parser("udp-server", help="serve masking requests over UDP")
    udp_server.add_argument("port", nargs="?")
    udp_server.add_argument("--host", default="0.0.0.0")
    add_impairment(udp_server)
    udp_server.set_defaults(func=cmd_udp_server)

    udp_client = sub.add_parser("udp-client", help="prompt for a phrase and mask it over UDP")
    udp_client.add_argument("--timeout-ms", default=CLIENT_TIMEOUT_MS, type=int, help="receive timeout; 0 waits forever")
    add_impairment(udp_client)
    udp_client.set_defaults(func=cmd_udp_client)

    return parser


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    logging.basicConfig(level=getattr(logging, args.log_level), format="%(asctime)s [%(levelname)s] %(message)s")
    return int(args.func(args))


if __name__ == "__main__":
    raise SystemExit(main())
