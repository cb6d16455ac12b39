"""Exemplo de rotação de credenciais e persistência com veil-secrets."""

import logging
import os
from pathlib import Path

from veil_secrets import CollectionConfig, CredentialCollection

# Configurar logging
logging.basicConfig(
    level=logging.INFO, format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)


def show(collection, paths):
    for path in paths:
        credential = collection[path]
        value = collection.get(*path)
        print(
            f"   {credential.path}: version={credential.version} "
            f"frozen={credential.frozen} value={value.hex()[:12]}..."
        )


def main():
    """Demonstra rotação e persistência."""

    print("\n=== veil-secrets - Rotação de Credenciais ===\n")

    paths = [("db", "password"), ("db", "replication"), ("license_key",)]

    # 1. Coleção inicial
    print("1. Criando coleção...")
    config = CollectionConfig(default_length=24, logger=logger)
    collection = CredentialCollection.create(config)
    collection.add("db", "password")
    collection.add("db", "replication", frozen=True)
    collection.add("license_key", value="ABCD-EFGH-IJKL")
    show(collection, paths)

    # 2. Rotação de uma credencial
    print("\n2. Rotacionando db/password...")
    collection.rotate("db", "password")
    show(collection, paths)

    # 3. Rotação de todas as credenciais não congeladas
    print("\n3. Rotacionando todas as credenciais...")
    collection.rotate_credentials()
    show(collection, paths)

    # 4. Troca do hasher (segredo mestre possivelmente comprometido)
    print("\n4. Rotacionando o hasher...")
    collection.rotate_hasher()
    show(collection, paths)

    # 5. Persistir e recarregar
    print("\n5. Persistindo em arquivo JSON...")
    store = Path("example_credentials.json")
    collection.to_file(str(store))
    loaded = CredentialCollection.from_file(str(store), config=config)
    for path in paths:
        assert loaded.get(*path) == collection.get(*path)
    print(f"   ✓ Valores idênticos após recarregar de {store}")

    # Cleanup
    if store.exists():
        os.remove(store)
        print(f"\n✓ Arquivo de exemplo removido: {store}")

    print("\n=== Fim do exemplo de rotação ===\n")


if __name__ == "__main__":
    main()
