"""Send test scans to the backend, as a camera station or a guard would."""

import argparse
import requests

BACKEND_URL = "http://localhost:8080/api"


def simulate_verify(student_id, plate, gate):
    resp = requests.post(f"{BACKEND_URL}/verify-access",
                         json={"studentId": student_id, "plateNumber": plate, "gateLocation": gate},
                         timeout=10)
    body = resp.json()
    if resp.ok:
        verdict = "✅ GRANTED" if body["isValid"] else f"⛔ DENIED ({body['reason']})"
        print(f"{verdict} student={student_id} plate={plate} gate={gate} log={body['accessLog']['id']}")
    else:
        print(f"❌ HTTP {resp.status_code}: {body}")


def simulate_manual(action, student_id, plate, gate, reason=None):
    payload = {"studentId": student_id, "plateNumber": plate, "gateLocation": gate}
    if action == "deny" and reason:
        payload["reason"] = reason
    resp = requests.post(f"{BACKEND_URL}/{action}-access", json=payload, timeout=10)
    print(f"✅ manual {action} plate={plate} gate={gate} → HTTP {resp.status_code}: {resp.json()}")


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Simulate gate scans for testing")
    parser.add_argument("--action", default="verify", choices=["verify", "grant", "deny"])
    parser.add_argument("--student", default="S100")
    parser.add_argument("--plate", default="ABC123")
    parser.add_argument("--gate", default="Gate1")
    parser.add_argument("--reason", default=None)
    parser.add_argument("--url", default=BACKEND_URL)
    args = parser.parse_args()
    BACKEND_URL = args.url.rstrip("/")

    if args.action == "verify":
        simulate_verify(args.student, args.plate, args.gate)
    else:
        simulate_manual(args.action, args.student, args.plate, args.gate, args.reason)
