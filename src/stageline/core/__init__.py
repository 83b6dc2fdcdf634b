# src/stageline/core/__init__.py
"""
Core do Stageline.

Este pacote contém a implementação canônica do engine de pipelines de
estágios orientados a eventos.

Componentes principais:
    - events      → nomes reservados e guard único de nomes
    - transitions → tabela de transições (entradas e próximos eventos)
    - router      → publish/subscribe síncrono com canal ``@all``
    - trace       → árvore causal de eventos com tempo relativo
    - context     → mapa compartilhado entre estágios
    - api         → convenções de chamada e APIs de handler
    - pipeline    → ciclo de vida (start, emit, end) e política de erros
    - config      → carregamento de configuração declarativa

Princípios fundamentais:
    - Nenhuma falha silenciosa: todo erro é observado ou propagado
    - Execução determinística para cadeias síncronas de emit
    - Estado explícito, sem singletons globais

Limites explícitos:
    - Não contém handlers de domínio
    - Não depende de CLI, transporte ou persistência
"""
