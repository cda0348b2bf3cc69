# API Module - local REST backend for the vault
