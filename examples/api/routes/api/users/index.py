"""GET /api/users, POST /api/users"""

USERS = [
    {"id": 1, "name": "Ada Lovelace", "email": "ada@example.com"},
    {"id": 2, "name": "Grace Hopper", "email": "grace@example.com"},
]


def get(request):
    limit = request.query.get_int("limit", default=len(USERS))
    return {"users": USERS[:limit], "total": len(USERS)}


async def post(request):
    data = await request.json()
    if not data.get("name"):
        return {"error": "name is required"}, 400
    user = {"id": len(USERS) + 1, "name": data["name"], "email": data.get("email")}
    return {"user": user}, 201
