import logging
import os
import sys
import traceback

sys.path.append(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))
from tonconnect.bridge.transport import HttpBridge
from tonconnect.common.errors import TransportError
from tonconnect.common.protocol import ConnectErrorEvent, ConnectEvent, ConnectRequest, TonAddressItem, TonProofItem
from tonconnect.config import load_settings
from tonconnect.crypto.keys import KeyPair
from tonconnect.session import TonConnect


def on_event(event):
    if isinstance(event, ConnectEvent):
        device = event.payload.device
        print(f"connected: {device.app_name} {device.app_version} ({device.platform.value})")
        for item in event.payload.items:
            if item.name == "ton_addr":
                print("  address:", item.address, "network:", item.network.value)
            else:
                print("  proof signature:", item.proof.signature)
    elif isinstance(event, ConnectErrorEvent):
        print("connect error:", event.payload.code, event.payload.message)
    else:
        print("wallet disconnected")


def on_error(err):
    print("dropped message:", err)


def client_flow(proof_payload=None):
    settings = load_settings()
    logging.basicConfig(level=settings.log_level, format="%(asctime)s %(levelname)s %(name)s %(message)s")

    keypair = KeyPair.from_secret_hex(settings.session_secret) if settings.session_secret else KeyPair.generate()
    bridge = HttpBridge(settings.bridge_url, connect_timeout=settings.connect_timeout)
    tc = TonConnect(settings.wallet_url, settings.bridge_url, keypair=keypair, bridge=bridge)

    items = [TonAddressItem()]
    if proof_payload:
        items.append(TonProofItem(payload=proof_payload))
    request = ConnectRequest(manifest_url=settings.manifest_url, items=items)
    print("open in wallet:")
    print(tc.create_connect_link(request))

    try:
        while True:
            try:
                tc.subscribe(on_event, on_error=on_error)
            except TransportError as e:
                # last_event_id survives, the next subscribe resumes after it
                print("bridge error:", e)
                if input(f"reconnect from event {bridge.last_event_id}? [y/N] ").strip().lower() != "y":
                    return
    except KeyboardInterrupt:
        print("Interrupted by user")
    except Exception as e:
        print("client error:", e)
        traceback.print_exc()
    finally:
        bridge.close()


if __name__ == "__main__":
    client_flow(sys.argv[1] if len(sys.argv) > 1 else None)
