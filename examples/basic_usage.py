# Copyright (C) 2025 Ivan Bondarenko
#
# This file is part of FlowCheck Engine.
#
# FlowCheck Engine is free software: you can redistribute it and/or modify
# it under the terms of the GNU Affero General Public License as published
# by the Free Software Foundation, either version 3 of the License, or
# (at your option) any later version.
#
# FlowCheck Engine is distributed in the hope that it will be useful,
# but WITHOUT ANY WARRANTY; without even the implied warranty of
# MERCHANTABILITY or FITNESS FOR A PARTICULAR PURPOSE. See the
# GNU Affero General Public License for more details.
#
# You should have received a copy of the GNU Affero General Public License
# along with FlowCheck Engine. If not, see <https://www.gnu.org/licenses/>.

"""
Basic Usage Example

This example validates a user registration: it loads the request fields,
checks them one by one, asks a (fake) directory whether the username is
free, and reports the outcome through a ValidationFlow.
"""

import asyncio
import logging

from flowcheck_core import FlowCheckConfig, FlowValidator

TAKEN_USERNAMES = {"admin", "root"}


async def username_is_free(username: str) -> tuple[bool, str]:
    await asyncio.sleep(0.01)  # stands in for a directory lookup
    return username not in TAKEN_USERNAMES, f"username '{username}' is taken"


async def register(request: dict) -> None:
    validator = FlowValidator(FlowCheckConfig())

    username = validator.add(lambda: request.get("username"), "username", type_=str)
    email = validator.add(lambda: request.get("email"), "email", type_=str)
    password = validator.add(lambda: request.get("password"), "password", type_=str)
    repeat = validator.add(lambda: request.get("password_repeat"), "password_repeat", type_=str)

    validator.check_not_none_or_empty(username)
    validator.check_matches(email, r"^[^@\s]+@[^@\s]+\.[a-z]{2,}$", "email is malformed")
    validator.check(password, lambda p: (len(p) >= 8, "password is too short"))
    validator.check_cross(password, repeat, lambda p, r: p == r, "passwords do not match")
    validator.check_async(username, username_is_free)

    account = validator.then_add(
        lambda entities: {"username": entities.get("username"), "email": entities.get("email")},
        "account",
    )

    await (
        validator.start_flow()
        .on_success(lambda entities: print(f"  registered: {validator.get_value(account)}"))
        .on_failure(lambda result, entities: print(f"  rejected {result}"))
        .finally_(lambda result: print(f"  ran {validator.step_count} steps"))
        .execute()
    )


async def main():
    logging.basicConfig(level=logging.INFO)

    requests = [
        {"username": "ann", "email": "ann@example.com", "password": "s3cret-pw", "password_repeat": "s3cret-pw"},
        {"username": "admin", "email": "boss@example.com", "password": "s3cret-pw", "password_repeat": "s3cret-pw"},
        {"username": "bob", "email": "bob@example", "password": "hunter22", "password_repeat": "hunter22"},
        {"username": "", "email": "x@example.com", "password": "short", "password_repeat": "short"},
    ]

    for request in requests:
        print(f"Registering {request['username']!r}...")
        await register(request)


if __name__ == "__main__":
    asyncio.run(main())
