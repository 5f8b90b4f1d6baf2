# app.py
"""
Entrypoint da aplicação.

Uso:
  python app.py migrate --db odontolab.db
  python app.py empresa set --nome "Lab Sorriso" --desconto-global 5
  python app.py catalogo adicionar "Coroa de Zircônia" --preco 220
  python app.py os nova --dentista "Dra. Ana" --paciente "João" --servico "Coroa de Zircônia"
  python app.py financeiro resumo --mes 3 --ano 2024
  python app.py dashboard
"""

from odontolab.adapters.cli import main

if __name__ == "__main__":
    main()
