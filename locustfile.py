"""
Load test for the settings and rates endpoints.

Run: locust -f locustfile.py --host http://localhost:3000
"""

import random

from locust import HttpUser, between, task

# Small pool so concurrent upserts hit the same keys (last write wins)
wallets = [f"0x{random.getrandbits(160):040x}" for _ in range(20)]


class MonetizerUser(HttpUser):
    wait_time = between(1, 2)

    @task(3)
    def compare_rates(self):
        # 503 is the injected rate-source failure, not a server fault
        with self.client.get("/api/rates/ETH", name="/api/rates/[symbol]", catch_response=True) as resp:
            if resp.status_code in (200, 503):
                resp.success()

    @task(2)
    def read_settings(self):
        wallet = random.choice(wallets)
        self.client.get(f"/api/settings/{wallet}", name="/api/settings/[address]")

    @task(1)
    def save_settings(self):
        wallet = random.choice(wallets)
        self.client.post(
            "/api/settings",
            json={"walletAddress": wallet, "payoutAddress": f"T{random.getrandbits(64):016x}"},
        )
