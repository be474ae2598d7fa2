import os

# 1. THE KEYS
SECRET_KEY = os.getenv("SECRET_KEY", "super_secret_random_key_CHANGE_THIS")
ALGORITHM = "HS256"
ACCESS_TOKEN_EXPIRE_MINUTES = int(os.getenv("ACCESS_TOKEN_EXPIRE_MINUTES", 30))

# 2. THE ROLES carried in the token's "role" claim
ROLE_STUDENT = "student"
ROLE_RECRUITER = "recruiter"

# Collection holding the profile for each role
ROLE_COLLECTIONS = {
    ROLE_STUDENT: "students",
    ROLE_RECRUITER: "recruiters",
}
