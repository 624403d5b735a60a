import pickle
import zlib
import base64
import os
from cryptography.fernet import Fernet, InvalidToken

RAW_KEY = b'AuraSealedProgramKey123456789012'
SECRET_KEY = base64.urlsafe_b64encode(RAW_KEY)

# 2 bytes prefix length + 4 bytes token length
HEADER_SIZE = 6


def save_sealed_program(program, filename, key=SECRET_KEY):
    # 1. serialize and compress the AST
    serialized_data = pickle.dumps(program, protocol=pickle.HIGHEST_PROTOCOL)
    compressed_data = zlib.compress(serialized_data, level=9)

    # 2. encrypt
    fernet = Fernet(key)
    encrypted_data = fernet.encrypt(compressed_data)

    # 3. random padding around the token
    p_len_val = os.urandom(1)[0] % 32 + 10
    prefix = os.urandom(p_len_val)
    suffix = os.urandom(os.urandom(1)[0] % 32 + 10)

    header = p_len_val.to_bytes(2, byteorder='big') + len(encrypted_data).to_bytes(4, byteorder='big')

    with open(filename, 'wb') as f:
        f.write(header + prefix + encrypted_data + suffix)


def load_sealed_program(filename, key=SECRET_KEY):
    """Return the program stored in a sealed file, or None if it can't be read back."""
    try:
        with open(filename, 'rb') as f:
            raw_data = f.read()

        if len(raw_data) < HEADER_SIZE:
            return None

        prefix_len = int.from_bytes(raw_data[:2], byteorder='big')
        content_len = int.from_bytes(raw_data[2:HEADER_SIZE], byteorder='big')

        start_pos = HEADER_SIZE + prefix_len
        end_pos = start_pos + content_len
        encrypted_content = raw_data[start_pos:end_pos]

        fernet = Fernet(key)
        decrypted_data = fernet.decrypt(encrypted_content)
        return pickle.loads(zlib.decompress(decrypted_data))
    except (OSError, InvalidToken, zlib.error, pickle.UnpicklingError):
        return None
