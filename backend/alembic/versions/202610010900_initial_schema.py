"""Initial schema: profiles, registrations, lookups and documents

Revision ID: 202610010900
Revises:
Create Date: 2026-10-01 09:00:00.000000

"""
from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision = '202610010900'
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    # ------------------------------
    # Profiles (one per Supabase auth user)
    # ------------------------------
    op.create_table(
        'profiles',
        sa.Column('id', sa.Uuid(), primary_key=True, nullable=False),
        sa.Column('full_name', sa.String(255), nullable=False),
        sa.Column('email', sa.String(255), nullable=False, unique=True, index=True),
        sa.Column('cpf', sa.String(14), nullable=True),
        sa.Column('institution', sa.String(255), nullable=True),
        sa.Column('role', sa.String(20), nullable=False, server_default='client'),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    )
    op.create_index('ix_profiles_role', 'profiles', ['role'])

    # ------------------------------
    # Lookup tables
    # ------------------------------
    op.create_table(
        'TiposEntidade',
        sa.Column('id_tipo_entidade', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('nome_tipo', sa.String(100), nullable=False, unique=True),
    )
    op.create_table(
        'Seguradoras',
        sa.Column('id_seguradora', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('nome_seguradora', sa.String(150), nullable=False, unique=True),
    )
    op.create_table(
        'Coberturas',
        sa.Column('id_cobertura', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('nome_cobertura', sa.String(150), nullable=False, unique=True),
        sa.Column('descricao_cobertura', sa.Text(), nullable=True),
    )
    op.create_table(
        'Assistencias',
        sa.Column('id_assistencia', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('nome_assistencia', sa.String(150), nullable=False, unique=True),
        sa.Column('descricao_assistencia', sa.Text(), nullable=True),
    )
    op.create_table(
        'ModelosVeiculo',
        sa.Column('id_modelo_veiculo', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('marca', sa.String(100), nullable=False),
        sa.Column('modelo', sa.String(100), nullable=False),
        sa.Column('versao', sa.String(100), nullable=True),
        sa.UniqueConstraint('marca', 'modelo', 'versao', name='uq_modelos_veiculo_marca_modelo_versao'),
    )

    # ------------------------------
    # Clients and licenses
    # ------------------------------
    op.create_table(
        'PessoasFisicas',
        sa.Column('id_pessoa_fisica', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('nome_completo', sa.String(255), nullable=False, index=True),
        sa.Column('cpf', sa.String(11), nullable=False, unique=True),
        sa.Column('rg', sa.String(20), nullable=True),
        sa.Column('data_nascimento', sa.Date(), nullable=True),
        sa.Column('email', sa.String(255), nullable=False),
        sa.Column('telefone', sa.String(20), nullable=True),
        sa.Column('logradouro', sa.String(255), nullable=True),
        sa.Column('numero', sa.String(20), nullable=True),
        sa.Column('complemento', sa.String(100), nullable=True),
        sa.Column('bairro', sa.String(100), nullable=True),
        sa.Column('cep', sa.String(9), nullable=True),
        sa.Column('cidade', sa.String(100), nullable=True),
        sa.Column('estado_uf', sa.String(2), nullable=True),
        sa.Column('tipo_relacao', sa.String(20), nullable=False, index=True),
        sa.Column('observacoes', sa.Text(), nullable=True),
        sa.Column('data_cadastro', sa.Date(), nullable=False, server_default=sa.func.current_date()),
    )
    op.create_table(
        'CNHs',
        sa.Column('id_cnh', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('id_pessoa_fisica', sa.Integer(), sa.ForeignKey('PessoasFisicas.id_pessoa_fisica', ondelete='CASCADE'), nullable=False, index=True),
        sa.Column('numero_registro', sa.String(20), nullable=False, unique=True),
        sa.Column('categoria', sa.String(5), nullable=False),
        sa.Column('data_emissao', sa.Date(), nullable=False),
        sa.Column('data_validade', sa.Date(), nullable=False),
        sa.Column('primeira_habilitacao', sa.Date(), nullable=True),
        sa.Column('local_emissao_cidade', sa.String(100), nullable=True),
        sa.Column('local_emissao_uf', sa.String(2), nullable=True),
        sa.Column('observacoes_cnh', sa.Text(), nullable=True),
    )
    op.create_index('ix_cnhs_data_validade', 'CNHs', ['data_validade'])

    # ------------------------------
    # Organizations and members
    # ------------------------------
    op.create_table(
        'Entidades',
        sa.Column('id_entidade', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('nome', sa.String(255), nullable=False, index=True),
        sa.Column('codigo_entidade', sa.String(50), nullable=False, unique=True),
        sa.Column('cnpj', sa.String(14), nullable=False, unique=True),
        sa.Column('id_tipo_entidade', sa.Integer(), sa.ForeignKey('TiposEntidade.id_tipo_entidade', ondelete='RESTRICT'), nullable=False, index=True),
        sa.Column('telefone', sa.String(20), nullable=True),
        sa.Column('email', sa.String(255), nullable=True),
        sa.Column('logradouro', sa.String(255), nullable=True),
        sa.Column('numero', sa.String(20), nullable=True),
        sa.Column('complemento', sa.String(100), nullable=True),
        sa.Column('bairro', sa.String(100), nullable=True),
        sa.Column('cep', sa.String(9), nullable=True),
        sa.Column('cidade', sa.String(100), nullable=True),
        sa.Column('estado_uf', sa.String(2), nullable=True),
        sa.Column('data_cadastro', sa.Date(), nullable=False, server_default=sa.func.current_date()),
    )
    op.create_table(
        'MembrosEntidade',
        sa.Column('id_membro_entidade', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('id_entidade_pai', sa.Integer(), sa.ForeignKey('Entidades.id_entidade', ondelete='CASCADE'), nullable=False, index=True),
        sa.Column('id_membro_pessoa_fisica', sa.Integer(), sa.ForeignKey('PessoasFisicas.id_pessoa_fisica', ondelete='CASCADE'), nullable=True, index=True),
        sa.Column('id_membro_entidade_filha', sa.Integer(), sa.ForeignKey('Entidades.id_entidade', ondelete='CASCADE'), nullable=True, index=True),
        sa.Column('funcao', sa.String(100), nullable=False),
        sa.Column('data_associacao', sa.Date(), nullable=True),
        sa.CheckConstraint(
            '(id_membro_pessoa_fisica IS NULL) <> (id_membro_entidade_filha IS NULL)',
            name='ck_membros_entidade_um_membro',
        ),
        sa.CheckConstraint(
            'id_membro_entidade_filha IS NULL OR id_membro_entidade_filha <> id_entidade_pai',
            name='ck_membros_entidade_nao_proprio',
        ),
        sa.UniqueConstraint('id_entidade_pai', 'id_membro_pessoa_fisica', name='uq_membros_entidade_pessoa'),
        sa.UniqueConstraint('id_entidade_pai', 'id_membro_entidade_filha', name='uq_membros_entidade_filha'),
    )

    # ------------------------------
    # Vehicles and drivers
    # ------------------------------
    op.create_table(
        'Veiculos',
        sa.Column('id_veiculo', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('placa_atual', sa.String(10), nullable=False, unique=True),
        sa.Column('placa_anterior', sa.String(10), nullable=True),
        sa.Column('chassi', sa.String(17), nullable=True, unique=True),
        sa.Column('codigo_renavam', sa.String(11), nullable=False, unique=True),
        sa.Column('marca', sa.String(100), nullable=False, index=True),
        sa.Column('modelo', sa.String(100), nullable=False),
        sa.Column('ano_fabricacao', sa.Integer(), nullable=False),
        sa.Column('ano_modelo', sa.Integer(), nullable=True),
        sa.Column('cor', sa.String(50), nullable=True),
        sa.Column('combustivel', sa.String(50), nullable=True),
        sa.Column('tipo_especie', sa.String(50), nullable=True),
        sa.Column('estado_crlv', sa.String(2), nullable=True),
        sa.Column('numero_serie_crlv', sa.String(50), nullable=True),
        sa.Column('data_expedicao_crlv', sa.Date(), nullable=True),
        sa.Column('data_validade_crlv', sa.Date(), nullable=True),
        sa.Column('id_proprietario_pessoa_fisica', sa.Integer(), sa.ForeignKey('PessoasFisicas.id_pessoa_fisica', ondelete='RESTRICT'), nullable=True, index=True),
        sa.Column('id_proprietario_entidade', sa.Integer(), sa.ForeignKey('Entidades.id_entidade', ondelete='RESTRICT'), nullable=True, index=True),
        sa.Column('data_aquisicao', sa.Date(), nullable=True),
        sa.Column('codigo_fipe', sa.String(20), nullable=True),
        sa.Column('valor_fipe', sa.Numeric(14, 2), nullable=True),
        sa.Column('mes_referencia_fipe', sa.String(50), nullable=True),
        sa.Column('data_consulta_fipe', sa.Date(), nullable=True),
        sa.Column('observacao', sa.Text(), nullable=True),
        sa.CheckConstraint(
            '(id_proprietario_pessoa_fisica IS NULL) <> (id_proprietario_entidade IS NULL)',
            name='ck_veiculos_um_proprietario',
        ),
    )
    op.create_table(
        'VeiculoMotoristas',
        sa.Column('id_veiculo_motorista', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('id_veiculo', sa.Integer(), sa.ForeignKey('Veiculos.id_veiculo', ondelete='CASCADE'), nullable=False, index=True),
        sa.Column('id_motorista', sa.Integer(), sa.ForeignKey('PessoasFisicas.id_pessoa_fisica', ondelete='CASCADE'), nullable=False, index=True),
        sa.Column('id_cnh', sa.Integer(), sa.ForeignKey('CNHs.id_cnh', ondelete='CASCADE'), nullable=False),
        sa.Column('categoria_cnh', sa.String(5), nullable=True),
        sa.UniqueConstraint('id_veiculo', 'id_motorista', name='uq_veiculo_motoristas_veiculo_motorista'),
    )

    # ------------------------------
    # Insurance policies
    # ------------------------------
    op.create_table(
        'Seguros',
        sa.Column('id_seguro', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('numero_apolice', sa.String(50), nullable=False, unique=True),
        sa.Column('id_seguradora', sa.Integer(), sa.ForeignKey('Seguradoras.id_seguradora', ondelete='RESTRICT'), nullable=False, index=True),
        sa.Column('data_vigencia_inicio', sa.Date(), nullable=False),
        sa.Column('data_vigencia_fim', sa.Date(), nullable=False, index=True),
        sa.Column('data_contratacao', sa.Date(), nullable=True),
        sa.Column('valor_indenizacao', sa.Numeric(14, 2), nullable=True),
        sa.Column('franquia', sa.Numeric(14, 2), nullable=True),
        sa.Column('observacoes', sa.Text(), nullable=True),
        sa.Column('id_titular_pessoa_fisica', sa.Integer(), sa.ForeignKey('PessoasFisicas.id_pessoa_fisica', ondelete='RESTRICT'), nullable=True, index=True),
        sa.Column('id_titular_entidade', sa.Integer(), sa.ForeignKey('Entidades.id_entidade', ondelete='RESTRICT'), nullable=True, index=True),
        sa.Column('id_veiculo', sa.Integer(), sa.ForeignKey('Veiculos.id_veiculo', ondelete='RESTRICT'), nullable=True, index=True),
        sa.CheckConstraint(
            '(id_titular_pessoa_fisica IS NULL) <> (id_titular_entidade IS NULL)',
            name='ck_seguros_um_titular',
        ),
        sa.CheckConstraint('data_vigencia_fim > data_vigencia_inicio', name='ck_seguros_vigencia'),
    )
    op.create_table(
        'SeguroCoberturas',
        sa.Column('id_seguro', sa.Integer(), sa.ForeignKey('Seguros.id_seguro', ondelete='CASCADE'), primary_key=True),
        sa.Column('id_cobertura', sa.Integer(), sa.ForeignKey('Coberturas.id_cobertura', ondelete='RESTRICT'), primary_key=True),
    )
    op.create_table(
        'SeguroAssistencias',
        sa.Column('id_seguro', sa.Integer(), sa.ForeignKey('Seguros.id_seguro', ondelete='CASCADE'), primary_key=True),
        sa.Column('id_assistencia', sa.Integer(), sa.ForeignKey('Assistencias.id_assistencia', ondelete='RESTRICT'), primary_key=True),
    )

    # ------------------------------
    # Documents
    # ------------------------------
    op.create_table(
        'Arquivos',
        sa.Column('id_arquivo', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('nome_arquivo', sa.String(255), nullable=False, index=True),
        sa.Column('tipo_documento', sa.String(30), nullable=False, index=True),
        sa.Column('caminho_armazenamento', sa.String(500), nullable=False, unique=True),
        sa.Column('mime_type', sa.String(150), nullable=True),
        sa.Column('tamanho_bytes', sa.BigInteger(), nullable=False, server_default='0'),
        sa.Column('observacoes', sa.Text(), nullable=True),
        sa.Column('data_upload', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False, index=True),
        sa.Column('id_pessoa_fisica', sa.Integer(), sa.ForeignKey('PessoasFisicas.id_pessoa_fisica', ondelete='SET NULL'), nullable=True),
        sa.Column('id_entidade', sa.Integer(), sa.ForeignKey('Entidades.id_entidade', ondelete='SET NULL'), nullable=True),
        sa.Column('id_veiculo', sa.Integer(), sa.ForeignKey('Veiculos.id_veiculo', ondelete='SET NULL'), nullable=True),
        sa.Column('id_seguro', sa.Integer(), sa.ForeignKey('Seguros.id_seguro', ondelete='SET NULL'), nullable=True),
        sa.CheckConstraint(
            '(CASE WHEN id_pessoa_fisica IS NULL THEN 0 ELSE 1 END'
            ' + CASE WHEN id_entidade IS NULL THEN 0 ELSE 1 END'
            ' + CASE WHEN id_veiculo IS NULL THEN 0 ELSE 1 END'
            ' + CASE WHEN id_seguro IS NULL THEN 0 ELSE 1 END) <= 1',
            name='ck_arquivos_uma_associacao',
        ),
    )


def downgrade() -> None:
    op.drop_table('Arquivos')
    op.drop_table('SeguroAssistencias')
    op.drop_table('SeguroCoberturas')
    op.drop_table('Seguros')
    op.drop_table('VeiculoMotoristas')
    op.drop_table('Veiculos')
    op.drop_table('MembrosEntidade')
    op.drop_table('Entidades')
    op.drop_index('ix_cnhs_data_validade', table_name='CNHs')
    op.drop_table('CNHs')
    op.drop_table('PessoasFisicas')
    op.drop_table('ModelosVeiculo')
    op.drop_table('Assistencias')
    op.drop_table('Coberturas')
    op.drop_table('Seguradoras')
    op.drop_table('TiposEntidade')
    op.drop_index('ix_profiles_role', table_name='profiles')
    op.drop_table('profiles')
