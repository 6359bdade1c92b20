"""
Locust Load Test Suite

Run scenarios:
  locust -f locustfile.py --tags concurrency  # Capacity + waitlist under contention
  locust -f locustfile.py --tags duplicate    # Same email from many users
  locust -f locustfile.py --tags throughput   # Listing cache
  locust -f locustfile.py --tags edge         # Bad input
  locust -f locustfile.py                     # All tests
"""

import random
from datetime import datetime, timedelta, timezone

from locust import HttpUser, between, events, tag, task

# Shared state
EVENT_IDS = []
CONCURRENCY_EVENT_ID = None
CONCURRENCY_SEATS = 10
DUPLICATE_EMAIL = "same.student@emsi.ma"


def random_email():
    return f"load_{random.randint(100000, 999999)}@test.com"


def future_date(days: int = 30) -> str:
    return (datetime.now(timezone.utc) + timedelta(days=days)).isoformat()


@events.test_start.add_listener
def on_test_start(environment, **kwargs):
    print("\n" + "=" * 60)
    print("SETUP: Creating concurrency test event...")
    print("=" * 60)


class ConcurrencyUser(HttpUser):
    """
    TEST 1: Concurrency - many users -> 10 seats, everyone else waitlisted

    Run: locust -f locustfile.py --tags concurrency -u 100 -r 50 --run-time 30s

    After test, verify:
      SELECT spots_taken FROM events WHERE id = X;                      -- = 10
      SELECT COUNT(*) FROM registrations
        WHERE event_id = X AND NOT on_waitlist AND status != 'cancelled'; -- = 10
      SELECT waitlist_position FROM registrations
        WHERE event_id = X AND on_waitlist ORDER BY 1;                  -- 1..N, no gaps
    """
    wait_time = between(0, 0.1)

    def on_start(self):
        global CONCURRENCY_EVENT_ID
        if CONCURRENCY_EVENT_ID:
            return

        resp = self.client.post("/api/v1/events/", json={
            "title": "Concurrency Test Event",
            "description": f"{CONCURRENCY_SEATS} seats only",
            "date": future_date(),
            "location": "Test",
            "capacity": CONCURRENCY_SEATS,
        })
        if resp.status_code == 201:
            CONCURRENCY_EVENT_ID = resp.json()["id"]
            print(f"\nCreated event {CONCURRENCY_EVENT_ID} with {CONCURRENCY_SEATS} seats\n")

    @tag("concurrency")
    @task
    def rsvp_limited_seats(self):
        """All users fight for the same seats; overflow goes to the waitlist."""
        if not CONCURRENCY_EVENT_ID:
            return

        with self.client.post(
            f"/api/v1/events/{CONCURRENCY_EVENT_ID}/rsvp",
            json={"name": "Load Student", "email": random_email()},
            name="/api/v1/events/{id}/rsvp",
            catch_response=True,
        ) as resp:
            if resp.status_code == 201:
                resp.success()
            elif resp.status_code == 400:
                resp.success()  # Random email collided with an earlier one
            else:
                resp.failure(f"Unexpected: {resp.status_code}")

    @tag("duplicate")
    @task
    def rsvp_same_email(self):
        """Only one active registration per email, whatever the casing."""
        if not CONCURRENCY_EVENT_ID:
            return

        email = random.choice([DUPLICATE_EMAIL, DUPLICATE_EMAIL.upper(), f" {DUPLICATE_EMAIL} "])
        with self.client.post(
            f"/api/v1/events/{CONCURRENCY_EVENT_ID}/rsvp",
            json={"name": "Same Student", "email": email},
            name="/api/v1/events/{id}/rsvp [duplicate]",
            catch_response=True,
        ) as resp:
            if resp.status_code == 201:
                resp.success()
            elif resp.status_code == 400 and resp.json()["error"]["code"] == "DUPLICATE_REGISTRATION":
                resp.success()
            else:
                resp.failure(f"Unexpected: {resp.status_code}")


class ThroughputUser(HttpUser):
    """
    TEST 2: Throughput - Cache effectiveness

    Run twice:
      1. With Redis: locust -f locustfile.py --tags throughput -u 100 -r 20 --run-time 60s
      2. Without Redis: REDIS_ENABLED=false, run again

    Compare avg response time, requests/sec and P95/P99 latency.
    """
    wait_time = between(0.1, 0.5)

    @tag("throughput", "read")
    @task(10)
    def list_events_cached(self):
        page = random.randint(1, 5)
        self.client.get(f"/api/v1/events/?page={page}&page_size=20",
                        name="/api/v1/events/ [cached]")

    @tag("throughput", "read")
    @task(3)
    def get_event_detail(self):
        if EVENT_IDS:
            self.client.get(f"/api/v1/events/{random.choice(EVENT_IDS)}",
                            name="/api/v1/events/{id}")

    @tag("throughput")
    @task(1)
    def health_check(self):
        self.client.get("/health")


class EdgeCaseUser(HttpUser):
    """
    TEST 3: Edge cases - Bad input handling

    Run: locust -f locustfile.py --tags edge -u 20 -r 5 --run-time 30s

    System should NOT crash, return proper error codes.
    """
    wait_time = between(0.5, 1.5)

    def _expect(self, resp, statuses):
        if resp.status_code in statuses:
            resp.success()
        else:
            resp.failure(f"Expected {statuses}, got {resp.status_code}")

    @tag("edge")
    @task
    def unknown_event(self):
        with self.client.post("/api/v1/events/999999/rsvp",
                              json={"name": "Ghost", "email": random_email()},
                              catch_response=True) as resp:
            self._expect(resp, [404])

    @tag("edge")
    @task
    def missing_email(self):
        with self.client.post("/api/v1/events/1/rsvp",
                              json={"name": "No Email"},
                              catch_response=True) as resp:
            self._expect(resp, [400, 404])

    @tag("edge")
    @task
    def malformed_email(self):
        with self.client.post("/api/v1/events/1/rsvp",
                              json={"name": "Bad", "email": "not-an-email"},
                              catch_response=True) as resp:
            self._expect(resp, [400])

    @tag("edge")
    @task
    def malformed_json(self):
        with self.client.post("/api/v1/events/1/rsvp",
                              data="not json at all",
                              catch_response=True) as resp:
            self._expect(resp, [400])

    @tag("edge")
    @task
    def negative_capacity(self):
        with self.client.post("/api/v1/events/",
                              json={"title": "Broken", "date": future_date(), "capacity": -5},
                              catch_response=True) as resp:
            self._expect(resp, [400])


class RealisticUser(HttpUser):
    """
    TEST 4: Realistic mixed workload

    Run: locust -f locustfile.py -u 200 -r 20 --run-time 120s

    Mostly browsing, some RSVPs, rare event creation.
    """
    wait_time = between(1, 3)

    @task(50)
    def browse_events(self):
        resp = self.client.get("/api/v1/events/?page=1&page_size=20")
        if resp.status_code == 200:
            for event in resp.json().get("events", []):
                if event["id"] not in EVENT_IDS:
                    EVENT_IDS.append(event["id"])

    @task(20)
    def view_event(self):
        if EVENT_IDS:
            self.client.get(f"/api/v1/events/{random.choice(EVENT_IDS)}",
                            name="/api/v1/events/{id}")

    @task(10)
    def rsvp(self):
        if EVENT_IDS:
            self.client.post(f"/api/v1/events/{random.choice(EVENT_IDS)}/rsvp",
                             json={
                                 "name": "Realistic Student",
                                 "email": random_email(),
                                 "program": random.choice(["Computer Science", "Finance", "Civil Engineering"]),
                                 "consent": random.random() < 0.5,
                             },
                             name="/api/v1/events/{id}/rsvp")

    @task(3)
    def create_event(self):
        resp = self.client.post("/api/v1/events/", json={
            "title": f"Event {random.randint(1, 10000)}",
            "description": "Test event",
            "date": future_date(random.randint(1, 90)),
            "location": "Venue",
            "capacity": random.randint(10, 500),
        })
        if resp.status_code == 201:
            EVENT_IDS.append(resp.json()["id"])
