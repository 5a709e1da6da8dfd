"""
Interview Simulation Script

Runs the complete candidate flow against a live server:
1. Sign up (or log in) a candidate
2. Upload a résumé to start an interview
3. Answer every question with an LLM-generated answer matching a persona
4. Finalize and print the score and summary

Usage:
    python scripts/simulate_interview.py [--base-url URL] [--persona PERSONA] [--email EMAIL]

Examples:
    python scripts/simulate_interview.py
    python scripts/simulate_interview.py --persona evasive
    python scripts/simulate_interview.py --list-personas
"""

import argparse
import sys
import tempfile
from pathlib import Path

import httpx

# Add project root to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from utils.llm_service import LLMService

# === CONSTANTS ===
DEFAULT_BASE_URL = "http://localhost:8000/api"
DEFAULT_USER_NAME = "Jane Smith"
DEFAULT_USER_EMAIL = "jane.smith@example.com"
DEFAULT_PASSWORD = "simulate-me"


# === PERSONAS ===
PERSONAS = {
    "detailed": {
        "name": "Detailed Expert",
        "traits": """
- Always provides detailed, comprehensive answers
- Includes specific numbers, metrics, and concrete examples
- Explains the reasoning behind decisions
""",
    },
    "concise": {
        "name": "Concise Professional",
        "traits": """
- Gives direct, focused answers without unnecessary detail
- Answers exactly what's asked, no more
""",
    },
    "evasive": {
        "name": "Evasive Candidate",
        "traits": """
- Gives vague, non-specific answers
- Uses generic statements like "I have experience with that"
""",
    },
}

DEFAULT_PERSONA = "detailed"

SAMPLE_RESUME = """
Jane Smith
Senior Fullstack Engineer

EXPERIENCE:
Tech Lead - Acme Corp (2021-Present)
- Lead team of 5 engineers building a SaaS platform (React, Node.js, PostgreSQL)
- Built real-time notifications using WebSockets and Redis pub/sub
- Implemented CI/CD pipelines with GitHub Actions, Docker, and Kubernetes

Senior Software Engineer - StartupXYZ (2019-2021)
- Built RESTful APIs and GraphQL endpoints serving 50k+ requests/day
- Deployed to AWS (EC2, RDS, S3, Lambda) using Terraform

TECHNICAL SKILLS:
- React, TypeScript, Node.js, Python/FastAPI
- PostgreSQL, MongoDB, Redis
"""

ANSWER_GENERATION_PROMPT = """You are simulating a candidate in a timed technical interview.

=== PERSONA ===
{persona_traits}

Answer in a few sentences, conversationally, drawing on this resume when relevant:
{resume}

Respond only with the answer, no labels or prefixes."""


class InterviewSimulator:
    """Drives one interview through the HTTP API with LLM-generated answers."""

    def __init__(self, base_url: str, persona: str = DEFAULT_PERSONA,
                 email: str = DEFAULT_USER_EMAIL, verbose: bool = True):
        if persona not in PERSONAS:
            raise ValueError(f"Unknown persona: {persona}. Available: {list(PERSONAS.keys())}")
        self.base_url = base_url.rstrip("/")
        self.persona = PERSONAS[persona]
        self.email = email
        self.verbose = verbose

        self.llm_service = LLMService()
        # Finalization scores every answer, so allow slow responses
        self.client = httpx.Client(timeout=300.0)
        self.token = None

    def _log(self, message: str):
        if self.verbose:
            print(message)

    def _headers(self) -> dict:
        return {"Authorization": f"Bearer {self.token}"}

    def authenticate(self):
        signup = self.client.post(
            f"{self.base_url}/auth/signup",
            json={"name": DEFAULT_USER_NAME, "email": self.email, "password": DEFAULT_PASSWORD},
        )
        if signup.status_code not in (200, 400):
            signup.raise_for_status()

        response = self.client.post(
            f"{self.base_url}/auth/login",
            json={"email": self.email, "password": DEFAULT_PASSWORD},
        )
        response.raise_for_status()
        self.token = response.json()["token"]
        self._log(f"Logged in as {self.email}")

    def start(self) -> dict:
        with tempfile.NamedTemporaryFile("w", suffix=".txt", delete=False) as f:
            f.write(SAMPLE_RESUME)
            resume_path = f.name
        try:
            with open(resume_path, "rb") as fh:
                response = self.client.post(
                    f"{self.base_url}/candidate/start",
                    files={"resume": ("resume.txt", fh, "text/plain")},
                    headers=self._headers(),
                )
        finally:
            Path(resume_path).unlink(missing_ok=True)
        response.raise_for_status()
        return response.json()["interview"]

    def answer(self, question: str) -> str:
        system_prompt = ANSWER_GENERATION_PROMPT.format(
            persona_traits=self.persona["traits"], resume=SAMPLE_RESUME
        )
        return self.llm_service.generate(prompt=question, system_prompt=system_prompt).strip()

    def run(self) -> dict:
        self.authenticate()
        interview = self.start()
        interview_id = interview["id"]
        self._log(f"Interview {interview_id} started with {len(interview['questions'])} questions")

        for index, q in enumerate(interview["questions"]):
            self._log(f"\n[{q['difficulty']} / {q['timeLimit']}s] {q['question']}")
            answer = self.answer(q["question"])
            self._log(f"> {answer}")
            response = self.client.post(
                f"{self.base_url}/candidate/submit-answer",
                json={"interviewId": interview_id, "questionIndex": index, "answer": answer},
                headers=self._headers(),
            )
            response.raise_for_status()

        self._log("\nFinalizing...")
        response = self.client.post(
            f"{self.base_url}/candidate/finalize-interview",
            json={"interviewId": interview_id},
            headers=self._headers(),
        )
        response.raise_for_status()
        result = response.json()
        self._log(f"\nScore: {result['totalScore']}%\n\n{result['summary']}")
        return result


def main():
    parser = argparse.ArgumentParser(description="Simulate a candidate interview against the API")
    parser.add_argument("--base-url", default=DEFAULT_BASE_URL)
    parser.add_argument("--persona", default=DEFAULT_PERSONA)
    parser.add_argument("--email", default=DEFAULT_USER_EMAIL)
    parser.add_argument("--list-personas", action="store_true")
    args = parser.parse_args()

    if args.list_personas:
        for key, persona in PERSONAS.items():
            print(f"{key}: {persona['name']}")
        return

    try:
        InterviewSimulator(args.base_url, persona=args.persona, email=args.email).run()
    except httpx.HTTPStatusError as e:
        print(f"[ERROR] HTTP {e.response.status_code}: {e.response.text}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
