# scripts/gen_keypair.py
import os, sys
from dotenv import set_key

sys.path.append(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))
from tonconnect.crypto.keys import KeyPair

def main():
    env_file = sys.argv[1] if len(sys.argv) > 1 else ".env"
    if not os.path.exists(env_file):
        open(env_file, "a").close()
    kp = KeyPair.generate()
    set_key(env_file, "TONCONNECT_SESSION_SECRET", kp.secret_hex())
    print(f"Wrote session secret to {env_file}")
    print(f"client id: {kp.public_hex()}")

if __name__ == "__main__":
    main()
