"""
Locust Load Test Suite

Run scenarios:
  locust -f locustfile.py --tags contention   # Race for a few spots
  locust -f locustfile.py --tags duplicate    # Same person, many submits
  locust -f locustfile.py --tags throughput   # Test cache
  locust -f locustfile.py --tags edge         # Test bad input
  locust -f locustfile.py                     # All tests
"""

import random
from datetime import datetime, timezone, timedelta

from locust import HttpUser, task, between, tag, events

# Shared state
EVENT_IDS = []
CONTENTION_EVENT_ID = None
CONTENTION_SPOTS = 10

# 409 is a lost race, 400 covers already joined / full: both are expected
JOIN_REJECTIONS = (400, 409)


def random_email():
    return f"load_{random.randint(10000, 99999)}@test.com"


@events.test_start.add_listener
def on_test_start(environment, **kwargs):
    print("\n" + "=" * 60)
    print(f"SETUP: contention event will have {CONTENTION_SPOTS} spots")
    print("=" * 60)


@events.test_stop.add_listener
def on_test_stop(environment, **kwargs):
    if CONTENTION_EVENT_ID:
        print(f"\nVerify: GET /api/v1/events/{CONTENTION_EVENT_ID}")
        print(f"  currentAttendees must equal len(attendees) and be <= {CONTENTION_SPOTS}\n")


class ContentionUser(HttpUser):
    """
    TEST 1: Contention - 100 users -> 10 spots

    Run: locust -f locustfile.py --tags contention -u 100 -r 50 --run-time 30s
    """
    wait_time = between(0, 0.1)

    def on_start(self):
        global CONTENTION_EVENT_ID
        self.email = random_email()
        self.client.post("/api/v1/users/", json={"email": self.email, "name": "Load Tester"})

        if not CONTENTION_EVENT_ID:
            future = (datetime.now(timezone.utc) + timedelta(days=30)).isoformat()
            resp = self.client.post("/api/v1/events/", json={
                "title": "Contention Test Event",
                "description": f"{CONTENTION_SPOTS} spots only",
                "date": future,
                "location": "Test",
                "maxAttendees": CONTENTION_SPOTS,
                "creatorEmail": self.email,
            })
            if resp.status_code == 201:
                CONTENTION_EVENT_ID = resp.json()["eventId"]
                print(f"\nCreated event {CONTENTION_EVENT_ID} with {CONTENTION_SPOTS} spots\n")

    @tag("contention")
    @task
    def join_limited_event(self):
        """All users fight for the same spots."""
        if not CONTENTION_EVENT_ID:
            return

        with self.client.post(
            f"/api/v1/events/{CONTENTION_EVENT_ID}/join",
            json={"email": self.email},
            name="/api/v1/events/{id}/join",
            catch_response=True,
        ) as resp:
            if resp.status_code == 200 or resp.status_code in JOIN_REJECTIONS:
                resp.success()
            else:
                resp.failure(f"Unexpected: {resp.status_code}")


class DuplicateSubmitUser(HttpUser):
    """
    TEST 2: Double submit - one email, many concurrent joins

    Run: locust -f locustfile.py --tags duplicate -u 50 -r 50 --run-time 15s
    Exactly one 200 per event is expected.
    """
    wait_time = between(0, 0.05)

    def on_start(self):
        resp = self.client.post("/api/v1/events/", json={"title": "Duplicate Submit", "maxAttendees": 100})
        self.event_id = resp.json()["eventId"] if resp.status_code == 201 else None

    @tag("duplicate")
    @task
    def join_same_email(self):
        if not self.event_id:
            return
        email = random.choice(["dup@test.com", "DUP@test.com", " dup@Test.com "])
        with self.client.post(
            f"/api/v1/events/{self.event_id}/join",
            json={"email": email},
            name="/api/v1/events/{id}/join [duplicate]",
            catch_response=True,
        ) as resp:
            if resp.status_code == 200 or resp.status_code in JOIN_REJECTIONS:
                resp.success()
            else:
                resp.failure(f"Unexpected: {resp.status_code}")


class ThroughputUser(HttpUser):
    """
    TEST 3: Throughput - Cache effectiveness

    Run twice:
      1. With Redis: locust -f locustfile.py --tags throughput -u 100 -r 20 --run-time 60s
      2. Without Redis: REDIS_ENABLED=false, run again
    """
    wait_time = between(0.1, 0.5)

    @tag("throughput", "read")
    @task(10)
    def list_events_cached(self):
        resp = self.client.get("/api/v1/events/", name="/api/v1/events/ [cached]")
        if resp.status_code == 200:
            for event in resp.json()[:50]:
                if event["id"] not in EVENT_IDS:
                    EVENT_IDS.append(event["id"])

    @tag("throughput", "read")
    @task(3)
    def get_event_detail(self):
        if EVENT_IDS:
            self.client.get(f"/api/v1/events/{random.choice(EVENT_IDS)}", name="/api/v1/events/{id}")

    @tag("throughput", "read")
    @task(3)
    def check_membership(self):
        if EVENT_IDS:
            self.client.get(
                f"/api/v1/events/{random.choice(EVENT_IDS)}/check-join/{random_email()}",
                name="/api/v1/events/{id}/check-join/{email}",
            )

    @tag("throughput")
    @task(1)
    def health_check(self):
        self.client.get("/health")


class EdgeCaseUser(HttpUser):
    """
    TEST 4: Edge cases - Bad input handling

    Run: locust -f locustfile.py --tags edge -u 20 -r 5 --run-time 30s

    System should NOT crash, return proper error codes.
    """
    wait_time = between(0.5, 1.5)

    def _expect(self, resp, allowed):
        if resp.status_code in allowed:
            resp.success()
        else:
            resp.failure(f"Expected {allowed}, got {resp.status_code}")

    @tag("edge")
    @task
    def malformed_event_id(self):
        with self.client.post(
            "/api/v1/events/999999/join",
            json={"email": random_email()},
            catch_response=True,
        ) as resp:
            self._expect(resp, [400])

    @tag("edge")
    @task
    def missing_email(self):
        if not EVENT_IDS:
            return
        with self.client.post(
            f"/api/v1/events/{random.choice(EVENT_IDS)}/join",
            json={"email": "   "},
            name="/api/v1/events/{id}/join [no email]",
            catch_response=True,
        ) as resp:
            self._expect(resp, [400, 404])

    @tag("edge")
    @task
    def negative_capacity(self):
        with self.client.post(
            "/api/v1/events/",
            json={"title": "Negative", "maxAttendees": -5},
            catch_response=True,
        ) as resp:
            self._expect(resp, [400])

    @tag("edge")
    @task
    def malformed_json(self):
        with self.client.post(
            "/api/v1/events/",
            data="not json at all",
            catch_response=True,
        ) as resp:
            self._expect(resp, [400, 422])

    @tag("edge")
    @task
    def foreign_edit(self):
        if not EVENT_IDS:
            return
        with self.client.put(
            f"/api/v1/events/{random.choice(EVENT_IDS)}",
            json={"title": "Hijack", "creatorEmail": random_email()},
            name="/api/v1/events/{id} [foreign edit]",
            catch_response=True,
        ) as resp:
            # Events created without a creator are editable by anyone
            self._expect(resp, [200, 403, 404])


class RealisticUser(HttpUser):
    """
    TEST 5: Realistic mixed workload

    Run: locust -f locustfile.py -u 200 -r 20 --run-time 120s

    Mostly browsing, some joins, rare creates.
    """
    wait_time = between(1, 3)

    def on_start(self):
        self.email = random_email()
        self.client.post("/api/v1/users/", json={"email": self.email, "name": "Visitor"})

    @task(50)
    def browse_events(self):
        resp = self.client.get("/api/v1/events/")
        if resp.status_code == 200:
            for event in resp.json()[:50]:
                if event["id"] not in EVENT_IDS:
                    EVENT_IDS.append(event["id"])

    @task(20)
    def view_event(self):
        if EVENT_IDS:
            self.client.get(f"/api/v1/events/{random.choice(EVENT_IDS)}", name="/api/v1/events/{id}")

    @task(5)
    def my_events(self):
        self.client.get(f"/api/v1/events/by-creator/{self.email}", name="/api/v1/events/by-creator/{email}")

    @task(10)
    def join_event(self):
        if not EVENT_IDS:
            return
        with self.client.post(
            f"/api/v1/events/{random.choice(EVENT_IDS)}/join",
            json={"email": self.email},
            name="/api/v1/events/{id}/join",
            catch_response=True,
        ) as resp:
            if resp.status_code == 200 or resp.status_code in JOIN_REJECTIONS + (404,):
                resp.success()

    @task(3)
    def create_event(self):
        future = (datetime.now(timezone.utc) + timedelta(days=random.randint(1, 90))).isoformat()
        resp = self.client.post("/api/v1/events/", json={
            "title": f"Event {random.randint(1, 10000)}",
            "description": "Test event",
            "date": future,
            "location": "Venue",
            "maxAttendees": random.randint(0, 50),
            "creatorEmail": self.email,
        })
        if resp.status_code == 201:
            EVENT_IDS.append(resp.json()["eventId"])
