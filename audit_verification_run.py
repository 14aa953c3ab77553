import time
import httpx
import subprocess
import sys


def run_verification():
    print("Starting Economic Flow Simulator HTTP server...")
    server_process = subprocess.Popen(
        [sys.executable, "-m", "uvicorn", "api.http_server:app", "--port", "8000"],
        stdout=subprocess.PIPE,
        stderr=subprocess.PIPE,
        text=True
    )

    # Wait for server to start
    time.sleep(3)

    try:
        client = httpx.Client(base_url="http://127.0.0.1:8000")

        print("Checking server health...")
        print(f"Health Status: {client.get('/health').json()}")

        print("\nSimulating each scenario preset...")
        scenarios = client.get("/v1/scenarios").json()["data"]["scenarios"]
        for scenario in scenarios:
            resp = client.post(
                f"/v1/scenarios/{scenario['id']}/simulation",
                params={"caller_identity": "verification-script"},
            ).json()
            print(f"- {scenario['id']}: {resp['summary']}")
            for insight in resp["data"]["insights"]:
                print(f"    * {insight}")

        print("\nSimulating a manual input vector...")
        manual = client.post(
            "/v1/simulations",
            json={"inputs": {"interestRate": 1.0, "oilPrice": 10}, "caller_identity": "verification-script"},
        ).json()
        print(f"Nodes: {manual['data']['nodes']}")
        print(f"Markets: {manual['data']['markets']}")

        print("\nQuerying audit log...")
        log = client.post("/v1/audit-log", json={"limit": 20}).json()
        print(f"Audit entries returned: {len(log['records'])}")
        for entry in log["records"][:5]:
            print(f"- {entry['operation']} v{entry['model_version']} [{entry['status']}]")

        print("\nVerification complete.")
    finally:
        server_process.terminate()
        server_process.wait()


if __name__ == "__main__":
    run_verification()
