#!/usr/bin/env python3
"""
Sanity check script to verify the basic flow of the application.
This script:
1. Checks the API health endpoint
2. Signs up a therapist, who lands in the pending queue
3. Logs the therapist back in
4. Asks the Aura companion for a one-off reply

Usage:
    python scripts/sanity_check.py
"""

import os
import sys
import uuid
import asyncio

import httpx
from rich.console import Console
from rich.table import Table

console = Console()

# API URL (can be overridden with environment variable)
API_URL = os.getenv("API_URL", "http://localhost:8000")

run_id = str(uuid.uuid4())[:8]

SIGNUP = {
    "fullName": f"Sanity Therapist {run_id}",
    "email": f"therapist_{run_id}@example.com",
    "password": "sanity-check-pw",
    "role": "therapist",
}


async def check_health(client):
    """Check if the API is healthy"""
    console.print("\n[bold blue]Checking API health...[/bold blue]")
    try:
        response = await client.get(f"{API_URL}/health")
    except httpx.HTTPError as e:
        console.print(f"[red]✗ Error connecting to API: {str(e)}[/red]")
        return False

    if response.status_code == 200:
        console.print("[green]✓ API is healthy![/green]")
        return True
    console.print(f"[red]✗ API returned status {response.status_code}[/red]")
    return False


async def signup_professional(client):
    console.print("\n[bold blue]Signing up a therapist...[/bold blue]")
    response = await client.post(f"{API_URL}/auth/signup", json=SIGNUP)
    if response.status_code != 201:
        console.print(f"[red]✗ Signup failed: {response.status_code} - {response.text}[/red]")
        return None

    data = response.json()
    if data["status"] != "pending":
        console.print(f"[red]✗ Expected a pending account, got {data['status']}[/red]")
        return None
    console.print(f"[green]✓ Signed up user {data['id']} (pending verification)[/green]")
    return data


async def login(client):
    console.print("\n[bold blue]Logging in...[/bold blue]")
    response = await client.post(
        f"{API_URL}/auth/login",
        json={"email": SIGNUP["email"], "password": SIGNUP["password"]},
    )
    if response.status_code != 200:
        console.print(f"[red]✗ Login failed: {response.status_code} - {response.text}[/red]")
        return None

    data = response.json()
    table = Table(title="Session")
    table.add_column("Field")
    table.add_column("Value")
    for key in ("id", "fullName", "role", "status", "requiresVerification"):
        table.add_row(key, str(data.get(key)))
    console.print(table)
    return data


async def ask_companion(client):
    console.print("\n[bold blue]Asking Aura for a reply...[/bold blue]")
    response = await client.post(
        f"{API_URL}/companion/generate",
        json={"prompt": "Share one short grounding exercise."},
        timeout=30.0,
    )
    if response.status_code != 200:
        console.print(f"[red]✗ Companion call failed: {response.status_code} - {response.text}[/red]")
        return None

    reply = response.json()["response"]
    console.print(f"[green]✓ Aura replied:[/green] [dim]{reply}[/dim]")
    return reply


async def run_sanity_check():
    """Run the full sanity check flow"""
    console.print("[bold yellow]=== Connecto Backend Sanity Check ===[/bold yellow]")
    console.print(f"API URL: {API_URL}")
    console.print(f"Run ID: {run_id}")

    # The client keeps the session cookie between steps
    async with httpx.AsyncClient() as client:
        if not await check_health(client):
            console.print("[bold red]Sanity check failed: API is not healthy![/bold red]")
            return False

        if not await signup_professional(client):
            console.print("[bold red]Sanity check failed: Couldn't sign up![/bold red]")
            return False

        await client.post(f"{API_URL}/auth/logout")

        if not await login(client):
            console.print("[bold red]Sanity check failed: Couldn't log in![/bold red]")
            return False

        if await ask_companion(client) is None:
            console.print("[bold red]Sanity check failed: Companion did not answer![/bold red]")
            return False

    console.print("\n[bold green]=== Sanity Check Passed! ===[/bold green]")
    console.print("All features are working as expected.")
    return True


if __name__ == "__main__":
    result = asyncio.run(run_sanity_check())
    sys.exit(0 if result else 1)
